"""Shared fakes for exporter tests."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from errors import DataSourceError
from executor import QueryExecutor
from models import Row


class FakeExecutor(QueryExecutor):
    """Answers queries from a dict of query -> rows (or an exception to raise)."""

    def __init__(self, responses: dict[str, Any] | None = None, default: Any = None) -> None:
        self.responses = dict(responses or {})
        self.default = default
        self.queries: list[str] = []
        self.closed = False

    def execute(self, query: str) -> list[Row]:
        self.queries.append(query)
        answer = self.responses.get(query, self.default)
        if isinstance(answer, Exception):
            raise answer
        if answer is None:
            raise DataSourceError("no canned response", query=query)
        return [Row(r) for r in answer]

    def close(self) -> None:
        self.closed = True


class RecordingGauge:
    """Stands in for a GaugeHandle and records every set call."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.calls: list[tuple[dict[str, str] | None, float]] = []

    def set(self, labels_or_value: Any, value: Any = None) -> None:
        if value is None:
            self.calls.append((None, labels_or_value))
        else:
            self.calls.append((dict(labels_or_value), value))


def recording_handles(spec) -> dict[str, RecordingGauge]:
    return {key: RecordingGauge(d.name) for key, d in spec.metrics.items()}


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor()
