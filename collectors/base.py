"""
Base collector declaration: every collector is a query plus a mapping function
that turns the query's rows into gauge updates.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Protocol

from models import MetricDescriptor, Row
from utils import get_logger, is_number, safe_ratio

logger = get_logger("collectors")


class Settable(Protocol):
    name: str

    def set(self, labels_or_value: Any, value: Any = ...) -> None: ...


MetricsHandle = Mapping[str, Settable]
MappingFn = Callable[[Sequence[Row], MetricsHandle], None]


@dataclass(frozen=True, eq=False)
class CollectorSpec:
    """
    Immutable collector declaration.

    `columns` is the arity of the query's SELECT list; the mapping function reads
    cells positionally, so the query projection and the mapping change together.
    """
    id: str
    metrics: Mapping[str, MetricDescriptor]
    query: str
    mapping: MappingFn
    columns: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "metrics", MappingProxyType(dict(self.metrics)))
        if not self.metrics:
            raise ValueError(f"collector {self.id!r} declares no metrics")
        if self.columns < 1:
            raise ValueError(f"collector {self.id!r} must project at least one column")

    def describe(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "columns": self.columns,
            "metrics": {key: d.to_dict() for key, d in self.metrics.items()},
        }


# -----------------------------------------------------------------------------
# Mapping helpers
# -----------------------------------------------------------------------------

def set_if_number(gauge: Settable, value: float, labels: Mapping[str, str] | None = None) -> bool:
    """Publish value only if it is a number. Returns whether a set happened."""
    if not is_number(value):
        logger.debug("Skipped %s %s: value is not a number", gauge.name, dict(labels or {}))
        return False
    if labels is None:
        gauge.set(value)
    else:
        gauge.set(labels, value)
    logger.debug("Fetched %s %s = %s", gauge.name, dict(labels or {}), value)
    return True


def publish_ratio(
    gauge: Settable,
    numerator: float,
    denominator: float,
    labels: Mapping[str, str] | None = None,
) -> bool:
    """numerator/denominator*100, skipped on a zero or non-numeric denominator."""
    return set_if_number(gauge, safe_ratio(numerator, denominator), labels)


def first_row(rows: Sequence[Row]) -> Row | None:
    return rows[0] if rows else None


# -----------------------------------------------------------------------------
# Builders for the common shapes
# -----------------------------------------------------------------------------

def scalar_collector(
    collector_id: str,
    descriptor: MetricDescriptor,
    query: str,
    key: str | None = None,
) -> CollectorSpec:
    """Single row, single numeric column, one unlabeled gauge."""
    key = key or descriptor.name

    def mapping(rows: Sequence[Row], metrics: MetricsHandle) -> None:
        row = first_row(rows)
        if row is not None:
            set_if_number(metrics[key], row.as_number(0))

    return CollectorSpec(collector_id, {key: descriptor}, query, mapping, columns=1)


def pivot_collector(
    collector_id: str,
    columns: Sequence[tuple[str, MetricDescriptor]],
    query: str,
) -> CollectorSpec:
    """Single row whose columns each feed their own unlabeled gauge, in order."""
    keys = [key for key, _ in columns]

    def mapping(rows: Sequence[Row], metrics: MetricsHandle) -> None:
        row = first_row(rows)
        if row is None:
            return
        for index, key in enumerate(keys):
            set_if_number(metrics[key], row.as_number(index))

    return CollectorSpec(collector_id, dict(columns), query, mapping, columns=len(keys))


def labeled_collector(
    collector_id: str,
    descriptor: MetricDescriptor,
    query: str,
    label_columns: Sequence[str],
    static_labels: Mapping[str, str] | None = None,
    key: str | None = None,
) -> CollectorSpec:
    """
    One labeled set per row. The leading columns are label values (named by
    label_columns, in order) and the column after them is the value.
    """
    key = key or descriptor.name
    label_columns = tuple(label_columns)
    static_labels = dict(static_labels or {})
    value_index = len(label_columns)
    if set(label_columns) | set(static_labels) != set(descriptor.label_names):
        raise ValueError(f"collector {collector_id!r}: labels do not cover {list(descriptor.label_names)}")

    def mapping(rows: Sequence[Row], metrics: MetricsHandle) -> None:
        gauge = metrics[key]
        for row in rows:
            labels = {name: row.as_string(i) for i, name in enumerate(label_columns)}
            labels.update(static_labels)
            set_if_number(gauge, row.as_number(value_index), labels)

    return CollectorSpec(collector_id, {key: descriptor}, query, mapping, columns=value_index + 1)


def ratio_collector(
    collector_id: str,
    descriptor: MetricDescriptor,
    query: str,
    key: str | None = None,
) -> CollectorSpec:
    """Single row of (counter, base); publishes counter/base as a percentage."""
    key = key or descriptor.name

    def mapping(rows: Sequence[Row], metrics: MetricsHandle) -> None:
        row = first_row(rows)
        if row is not None:
            publish_ratio(metrics[key], row.as_number(0), row.as_number(1))

    return CollectorSpec(collector_id, {key: descriptor}, query, mapping, columns=2)
