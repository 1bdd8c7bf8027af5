"""Core domain: models, ports, conversion and batching."""
