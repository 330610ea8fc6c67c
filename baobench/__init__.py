"""Benchmark harness plugins for secrets-management servers."""

__version__ = "0.1.0"
