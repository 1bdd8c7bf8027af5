"""BDD step definitions for exporter features."""

from collections.abc import Iterator
from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, then, when

from ddstats.core.errors import UploadError
from ddstats.core.models import ViewSnapshot
from ddstats.exporter import Exporter, ExporterOptions
from tests.fakes import WINDOW_END, FakeClock, RecordingUploader, make_snapshot


@dataclass
class ExportScenarioContext:
    """Mutable state shared between the steps of one scenario."""

    clock: FakeClock = field(default_factory=FakeClock)
    uploader: RecordingUploader = field(default_factory=RecordingUploader)
    errors: list[Exception] = field(default_factory=list)
    count_threshold: int = 0
    exporter: Exporter | None = None

    def get_exporter(self) -> Exporter:
        """Create the exporter on first use so Given steps can configure it."""
        if self.exporter is None:
            self.exporter = Exporter(
                ExporterOptions(
                    api_key="test-api-key",
                    on_error=self.errors.append,
                    bundle_count_threshold=self.count_threshold,
                    hostname="bdd-host",
                ),
                uploader=self.uploader,
                clock=self.clock,
            )
        return self.exporter


@pytest.fixture
def ctx() -> Iterator[ExportScenarioContext]:
    """Fresh scenario context for each test."""
    context = ExportScenarioContext()
    yield context
    if context.exporter is not None:
        context.exporter.close()


# === Given ===
@given(parsers.parse("an exporter with a count threshold of {n:d}"))
def step_exporter(ctx: ExportScenarioContext, n: int) -> None:
    ctx.count_threshold = n


@given("the backend rejects uploads")
def step_backend_rejects(ctx: ExportScenarioContext) -> None:
    ctx.uploader = RecordingUploader(error=UploadError("HTTP 403", status_code=403))


# === When ===
@when(parsers.parse('{n:d} snapshots of view "{name}" are exported'))
def step_export_snapshots(ctx: ExportScenarioContext, n: int, name: str) -> None:
    exporter = ctx.get_exporter()
    for _ in range(n):
        exporter.export_view(make_snapshot(name))


@when(parsers.parse('an empty snapshot of view "{name}" is exported'))
def step_export_empty(ctx: ExportScenarioContext, name: str) -> None:
    ctx.get_exporter().export_view(ViewSnapshot(name=name, rows=(), end=WINDOW_END))


@when("the exporter is flushed")
def step_flush(ctx: ExportScenarioContext) -> None:
    ctx.get_exporter().flush()


# === Then ===
@then(parsers.re(r"(?P<n>\d+) uploads? (is|are) made$"), converters={"n": int})
def step_upload_count(ctx: ExportScenarioContext, n: int) -> None:
    assert len(ctx.uploader.calls) == n


@then(parsers.parse("{n:d} upload is made eventually"))
def step_upload_eventually(ctx: ExportScenarioContext, n: int) -> None:
    assert ctx.uploader.uploaded.wait(timeout=2)
    assert len(ctx.uploader.calls) == n


@then(parsers.parse('the upload contains {n:d} series named "{metric}"'))
def step_upload_contents(ctx: ExportScenarioContext, n: int, metric: str) -> None:
    records = ctx.uploader.calls[-1]
    assert [r.metric for r in records] == [metric] * n


@then(parsers.re(r"(?P<n>\d+) errors? (is|are) reported"), converters={"n": int})
def step_error_count(ctx: ExportScenarioContext, n: int) -> None:
    assert len(ctx.errors) == n


@then("no errors are reported")
def step_no_errors(ctx: ExportScenarioContext) -> None:
    assert ctx.errors == []
