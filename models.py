"""
Data models for the exporter: result rows, metric descriptors,
per-collector results and scrape reports.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from errors import RowArityError
from utils import label_value, to_number


class OrchestratorState(str, Enum):
    IDLE = "idle"
    COLLECTING = "collecting"


class Row(Sequence):
    """
    One result row. Cells are scalars (str, number or None) in the order of the
    query's SELECT list, so accessors are positional.
    """

    __slots__ = ("_cells",)

    def __init__(self, cells: Iterable[Any]) -> None:
        self._cells = tuple(cells)

    def __getitem__(self, index):
        return self._cells[index]

    def __len__(self) -> int:
        return len(self._cells)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Row):
            return self._cells == other._cells
        if isinstance(other, (tuple, list)):
            return self._cells == tuple(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._cells)

    def __repr__(self) -> str:
        return f"Row{self._cells!r}"

    def cell(self, index: int) -> Any:
        if not 0 <= index < len(self._cells):
            raise RowArityError(f"column {index} requested from a row of {len(self._cells)} columns")
        return self._cells[index]

    def as_number(self, index: int) -> float:
        """Cell as float, NaN when it is NULL or not numeric."""
        return to_number(self.cell(index))

    def as_string(self, index: int) -> str:
        """Cell as a label value; NULL becomes ""."""
        return label_value(self.cell(index))


def as_rows(rows: Iterable[Iterable[Any]]) -> list[Row]:
    return [r if isinstance(r, Row) else Row(r) for r in rows]


@dataclass(frozen=True)
class MetricDescriptor:
    """A gauge declaration: name, help text and ordered label names."""
    name: str
    help: str
    label_names: tuple[str, ...] = ()
    kind: str = "gauge"

    def __post_init__(self) -> None:
        object.__setattr__(self, "label_names", tuple(self.label_names))
        if not self.name:
            raise ValueError("metric name must not be empty")
        if len(set(self.label_names)) != len(self.label_names):
            raise ValueError(f"{self.name}: duplicate label names {list(self.label_names)}")
        if self.kind != "gauge":
            raise ValueError(f"{self.name}: unsupported metric kind {self.kind!r}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "help": self.help,
            "label_names": list(self.label_names),
            "kind": self.kind,
        }


@dataclass
class CollectorResult:
    """Outcome of one collector within a scrape."""
    collector_id: str
    success: bool = True
    error: str | None = None
    rows: int = 0
    duration_sec: float = 0.0
    skipped: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "collector_id": self.collector_id,
            "success": self.success,
            "error": self.error,
            "rows": self.rows,
            "duration_sec": self.duration_sec,
            "skipped": self.skipped,
        }


@dataclass
class ScrapeReport:
    """Diagnostics for one full pass over the collector set."""
    started_at: float = 0.0
    duration_sec: float = 0.0
    deadline_exceeded: bool = False
    results: list[CollectorResult] = field(default_factory=list)

    @property
    def succeeded(self) -> list[str]:
        return [r.collector_id for r in self.results if r.success and not r.skipped]

    @property
    def failed(self) -> list[str]:
        return [r.collector_id for r in self.results if not r.success and not r.skipped]

    @property
    def skipped(self) -> list[str]:
        return [r.collector_id for r in self.results if r.skipped]

    def get(self, collector_id: str) -> CollectorResult | None:
        for r in self.results:
            if r.collector_id == collector_id:
                return r
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "started_at": self.started_at,
            "duration_sec": self.duration_sec,
            "deadline_exceeded": self.deadline_exceeded,
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
            "skipped": len(self.skipped),
            "results": [r.to_dict() for r in self.results],
        }
