"""Shared test fixtures for all test modules."""

import threading
from collections.abc import Callable, Iterator

import pytest

from ddstats.core.bundler import Bundler
from ddstats.exporter import Exporter, ExporterOptions
from tests.fakes import FakeClock, RecordingUploader


@pytest.fixture
def clock() -> FakeClock:
    """Provide a clock that only moves when advanced."""
    return FakeClock()


@pytest.fixture
def uploader() -> RecordingUploader:
    """Provide an uploader that records calls instead of sending them."""
    return RecordingUploader()


@pytest.fixture
def errors() -> list[Exception]:
    """Collect errors passed to an exporter's on_error hook."""
    return []


# === Bundler Fixtures ===


class BundleRecorder:
    """Bundle handler that records bundles and signals each call."""

    def __init__(self) -> None:
        self.bundles: list[list[object]] = []
        self._cond = threading.Condition()

    def __call__(self, bundle: list[object]) -> None:
        with self._cond:
            self.bundles.append(bundle)
            self._cond.notify_all()

    def wait_for_bundles(self, count: int = 1, timeout: float = 2.0) -> None:
        """Wait until the handler has been called `count` times."""
        with self._cond:
            assert self._cond.wait_for(
                lambda: len(self.bundles) >= count, timeout
            ), f"expected {count} bundles, got {len(self.bundles)}"


@pytest.fixture
def recorder() -> BundleRecorder:
    """Provide a recording bundle handler."""
    return BundleRecorder()


@pytest.fixture
def make_bundler(
    recorder: BundleRecorder, clock: FakeClock
) -> Iterator[Callable[..., Bundler[object]]]:
    """Factory fixture for bundlers wired to the recorder and fake clock.

    Every bundler created is closed at teardown.

    Usage:
        def test_something(make_bundler, recorder):
            bundler = make_bundler(count_threshold=3)
            bundler.add("a", 1)
    """
    created: list[Bundler[object]] = []

    def _make(**kwargs: object) -> Bundler[object]:
        kwargs.setdefault("clock", clock)
        bundler: Bundler[object] = Bundler(recorder, **kwargs)  # type: ignore[arg-type]
        created.append(bundler)
        return bundler

    yield _make

    for bundler in created:
        bundler.close()


# === Exporter Fixtures ===


@pytest.fixture
def make_exporter(
    uploader: RecordingUploader, clock: FakeClock, errors: list[Exception]
) -> Iterator[Callable[..., Exporter]]:
    """Factory fixture for exporters using the recording uploader.

    Keyword arguments are passed to ExporterOptions. Errors are collected
    into the `errors` fixture unless on_error is given.
    """
    created: list[Exporter] = []

    def _make(**kwargs: object) -> Exporter:
        kwargs.setdefault("api_key", "test-api-key")
        kwargs.setdefault("on_error", errors.append)
        kwargs.setdefault("hostname", "test-host")
        options = ExporterOptions(**kwargs)  # type: ignore[arg-type]
        exporter = Exporter(options, uploader=uploader, clock=clock)
        created.append(exporter)
        return exporter

    yield _make

    for exporter in created:
        exporter.close()
