"""
Error taxonomy for the exporter.

Recovered at the orchestrator boundary:
    DataSourceError  - query or connection failure, collector left stale
    RowArityError    - result set shape does not match the collector's projection

Fatal at startup:
    DuplicateMetricError, DuplicateCollectorError - the collector set is wrong

Programming errors:
    LabelMismatchError - set() called with the wrong label keys
"""
from __future__ import annotations


class ExporterError(Exception):
    """Base class for all exporter errors."""


class DataSourceError(ExporterError):
    """The query executor could not run a query (connection, syntax, timeout)."""

    def __init__(self, message: str, query: str | None = None) -> None:
        super().__init__(message)
        self.query = query


class ScrapeBusyError(ExporterError):
    """A scrape was requested while another one is still collecting."""


class ConfigurationError(ExporterError):
    """Invalid collector set or metric declarations. Halts initialization."""


class DuplicateMetricError(ConfigurationError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Metric {name!r} is already registered")
        self.name = name


class DuplicateCollectorError(ConfigurationError):
    def __init__(self, collector_id: str) -> None:
        super().__init__(f"Collector {collector_id!r} is defined more than once")
        self.collector_id = collector_id


class LabelMismatchError(ExporterError, ValueError):
    def __init__(self, metric: str, expected: tuple[str, ...], got: tuple[str, ...]) -> None:
        super().__init__(f"{metric}: expected labels {list(expected)}, got {list(got)}")
        self.metric = metric
        self.expected = expected
        self.got = got


class RowArityError(ExporterError, IndexError):
    """A row has fewer or more columns than the collector's query projects."""
