"""
Collection orchestrator: runs every collector once per scrape, isolating failures.
"""
from __future__ import annotations

import threading
import time
from collections.abc import Iterable, Mapping

from collectors import COLLECTORS
from collectors.base import CollectorSpec
from errors import DuplicateCollectorError, ExporterError, RowArityError, ScrapeBusyError
from executor import QueryExecutor
from models import CollectorResult, OrchestratorState, Row, ScrapeReport, as_rows
from registry import GaugeHandle, MetricRegistry
from utils import get_logger

logger = get_logger(__name__)

BUSY_WAIT = "wait"
BUSY_REJECT = "reject"


class CollectionOrchestrator:
    """
    Runs the collector set against a query executor and publishes into a registry.

    Collectors run sequentially in declaration order. A failing collector is
    logged and leaves its metrics at their previous values; the rest still run.
    Once deadline_sec has elapsed, remaining collectors are skipped.
    """

    def __init__(
        self,
        executor: QueryExecutor,
        registry: MetricRegistry | None = None,
        collectors: Iterable[CollectorSpec] = COLLECTORS,
        deadline_sec: float | None = None,
        busy_policy: str = BUSY_WAIT,
    ) -> None:
        if busy_policy not in (BUSY_WAIT, BUSY_REJECT):
            raise ValueError(f"busy_policy must be {BUSY_WAIT!r} or {BUSY_REJECT!r}, got {busy_policy!r}")
        self.executor = executor
        self.registry = registry if registry is not None else MetricRegistry()
        self.collectors: tuple[CollectorSpec, ...] = tuple(collectors)
        self.deadline_sec = deadline_sec if deadline_sec and deadline_sec > 0 else None
        self.busy_policy = busy_policy
        self.state = OrchestratorState.IDLE
        self.last_report: ScrapeReport | None = None
        self._lock = threading.Lock()
        self._handles: dict[str, Mapping[str, GaugeHandle]] = {}
        for spec in self.collectors:
            if spec.id in self._handles:
                raise DuplicateCollectorError(spec.id)
            self._handles[spec.id] = self.registry.bind(spec)

    def collect(self) -> ScrapeReport:
        """Run one scrape. Never raises for collector failures."""
        if not self._lock.acquire(blocking=self.busy_policy == BUSY_WAIT):
            raise ScrapeBusyError("a scrape is already in progress")
        try:
            self.state = OrchestratorState.COLLECTING
            report = self._collect_all()
            self.last_report = report
            return report
        finally:
            self.state = OrchestratorState.IDLE
            self._lock.release()

    def _collect_all(self) -> ScrapeReport:
        report = ScrapeReport(started_at=time.time())
        start = time.monotonic()
        for spec in self.collectors:
            if self.deadline_sec is not None and time.monotonic() - start >= self.deadline_sec:
                if not report.deadline_exceeded:
                    logger.warning("Scrape deadline of %.1fs exceeded, skipping remaining collectors", self.deadline_sec)
                report.deadline_exceeded = True
                report.results.append(CollectorResult(spec.id, success=False, skipped=True, error="deadline exceeded"))
                continue
            report.results.append(self.run_collector(spec))
        report.duration_sec = time.monotonic() - start
        logger.debug(
            "Scrape finished in %.3fs: %d ok, %d failed, %d skipped",
            report.duration_sec,
            len(report.succeeded),
            len(report.failed),
            len(report.skipped),
        )
        return report

    def run_collector(self, spec: CollectorSpec) -> CollectorResult:
        """Query, check arity, map. Any failure is contained in the returned result."""
        result = CollectorResult(spec.id)
        t0 = time.monotonic()
        try:
            rows = as_rows(self.executor.execute(spec.query))
            result.rows = len(rows)
            _check_arity(spec, rows)
            spec.mapping(rows, self._handles[spec.id])
        except ExporterError as e:
            result.success = False
            result.error = str(e)
            logger.warning("Collector %s failed: %s", spec.id, e)
        except Exception as e:
            result.success = False
            result.error = f"{type(e).__name__}: {e}"
            logger.exception("Collector %s raised unexpectedly", spec.id)
        result.duration_sec = time.monotonic() - t0
        return result


def _check_arity(spec: CollectorSpec, rows: list[Row]) -> None:
    for i, row in enumerate(rows):
        if len(row) != spec.columns:
            raise RowArityError(f"row {i} has {len(row)} columns, {spec.id} expects {spec.columns}")
