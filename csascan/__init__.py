"""csa-scan: container software composition analysis for CI pipelines."""

__version__ = "1.0.0"
