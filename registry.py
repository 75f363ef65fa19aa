"""
Registry adapter: binds MetricDescriptors to prometheus_client gauges held in a
private CollectorRegistry, and hands each collector handles scoped to its own metrics.
"""
from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Gauge, generate_latest

from errors import DuplicateMetricError, LabelMismatchError
from models import MetricDescriptor
from utils import get_logger, label_value

if TYPE_CHECKING:
    from collectors.base import CollectorSpec

logger = get_logger(__name__)

_MISSING = object()


class GaugeHandle:
    """Settable view of one registered gauge."""

    def __init__(self, descriptor: MetricDescriptor, gauge: Gauge) -> None:
        self.descriptor = descriptor
        self._gauge = gauge

    @property
    def name(self) -> str:
        return self.descriptor.name

    def set(self, labels_or_value: Any, value: Any = _MISSING) -> None:
        """
        set(value) for an unlabeled gauge, set(labels, value) for a labeled one.
        Labels must name exactly the declared label names. A repeated label set
        overwrites the previous value.
        """
        if value is _MISSING:
            labels: Mapping[str, Any] | None = None
            value = labels_or_value
        else:
            labels = labels_or_value
        value = float(value)
        if math.isnan(value):
            raise ValueError(f"{self.name}: refusing to publish NaN")

        expected = self.descriptor.label_names
        got = tuple(labels) if labels else ()
        if set(got) != set(expected) or len(got) != len(expected):
            raise LabelMismatchError(self.name, expected, got)
        if expected:
            self._gauge.labels(**{k: label_value(labels[k]) for k in expected}).set(value)
        else:
            self._gauge.set(value)


class MetricRegistry:
    """Owns every registered gauge and renders the exposition text."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry if registry is not None else CollectorRegistry()
        self._handles: dict[str, GaugeHandle] = {}

    @property
    def content_type(self) -> str:
        return CONTENT_TYPE_LATEST

    def register(self, descriptor: MetricDescriptor) -> GaugeHandle:
        """Register a descriptor once. A second registration of the same name is fatal."""
        if descriptor.name in self._handles:
            raise DuplicateMetricError(descriptor.name)
        gauge = Gauge(
            descriptor.name,
            descriptor.help,
            labelnames=descriptor.label_names,
            registry=self._registry,
        )
        handle = GaugeHandle(descriptor, gauge)
        self._handles[descriptor.name] = handle
        logger.debug("Registered gauge %s labels=%s", descriptor.name, list(descriptor.label_names))
        return handle

    def bind(self, spec: CollectorSpec) -> Mapping[str, GaugeHandle]:
        """Register all of a collector's metrics; return read-only handles keyed by local key."""
        return MappingProxyType({key: self.register(d) for key, d in spec.metrics.items()})

    def names(self) -> list[str]:
        return list(self._handles)

    def descriptors(self) -> Iterable[MetricDescriptor]:
        return (h.descriptor for h in self._handles.values())

    def sample(self, name: str, labels: Mapping[str, str] | None = None) -> float | None:
        """Current value of one timeseries, or None if no such series exists."""
        return self._registry.get_sample_value(name, dict(labels or {}))

    def exposition(self) -> bytes:
        return generate_latest(self._registry)
