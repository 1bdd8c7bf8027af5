"""Adapters connecting the core to HTTP and logging."""
