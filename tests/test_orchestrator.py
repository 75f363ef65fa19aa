"""Tests for the collection orchestrator."""
from __future__ import annotations

import sys
import threading
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from conftest import FakeExecutor
from collectors import COLLECTORS, get_collector
from collectors.base import CollectorSpec, scalar_collector
from errors import DataSourceError, DuplicateCollectorError, DuplicateMetricError, ScrapeBusyError
from models import MetricDescriptor, OrchestratorState
from orchestrator import CollectionOrchestrator
from registry import MetricRegistry


def _scalar(collector_id: str, query: str) -> CollectorSpec:
    return scalar_collector(collector_id, MetricDescriptor(collector_id, f"{collector_id} help"), query)


def test_failure_in_one_collector_does_not_abort_batch() -> None:
    specs = [_scalar("a", "QA"), _scalar("b", "QB"), _scalar("c", "QC")]
    executor = FakeExecutor({
        "QA": DataSourceError("connection reset"),
        "QB": [[2]],
        "QC": [[3]],
    })
    orch = CollectionOrchestrator(executor, collectors=specs)
    report = orch.collect()
    assert executor.queries == ["QA", "QB", "QC"]
    assert report.failed == ["a"]
    assert report.succeeded == ["b", "c"]
    assert "connection reset" in report.get("a").error
    assert orch.registry.sample("b") == 2.0
    assert orch.registry.sample("c") == 3.0
    assert orch.state is OrchestratorState.IDLE


def test_failed_collector_keeps_previous_value() -> None:
    spec = _scalar("a", "QA")
    executor = FakeExecutor({"QA": [[7]]})
    orch = CollectionOrchestrator(executor, collectors=[spec])
    orch.collect()
    executor.responses["QA"] = DataSourceError("timeout")
    report = orch.collect()
    assert report.failed == ["a"]
    assert orch.registry.sample("a") == 7.0


def test_unexpected_exception_in_mapping_is_contained() -> None:
    def explode(rows, metrics):
        raise RuntimeError("bug")

    bad = CollectorSpec("bad", {"bad": MetricDescriptor("bad", "bad")}, "QBAD", explode, columns=1)
    good = _scalar("good", "QGOOD")
    orch = CollectionOrchestrator(FakeExecutor({"QBAD": [[1]], "QGOOD": [[1]]}), collectors=[bad, good])
    report = orch.collect()
    assert report.failed == ["bad"]
    assert "RuntimeError" in report.get("bad").error
    assert report.succeeded == ["good"]


def test_arity_mismatch_is_a_collector_failure() -> None:
    spec = get_collector("mssql_io_stall")
    orch = CollectionOrchestrator(FakeExecutor({spec.query: [["dbA", 10, 20]]}), collectors=[spec])
    report = orch.collect()
    assert report.failed == ["mssql_io_stall"]
    assert "expects 6" in report.get("mssql_io_stall").error


def test_full_collector_set_survives_total_outage() -> None:
    executor = FakeExecutor(default=DataSourceError("server unreachable"))
    orch = CollectionOrchestrator(executor)
    report = orch.collect()
    assert len(report.results) == len(COLLECTORS)
    assert len(report.failed) == len(COLLECTORS)
    assert len(executor.queries) == len(COLLECTORS)


def test_full_collector_set_publishes() -> None:
    responses = {
        get_collector("mssql_up").query: [[1]],
        get_collector("mssql_product_version").query: [["16.0.1000.6", "16.0.1000.6"]],
        get_collector("mssql_io_stall").query: [["dbA", 10, 20, 30, 5, 8]],
        get_collector("mssql_buffer_cache_hit_ratio").query: [[500, 1000]],
    }
    orch = CollectionOrchestrator(FakeExecutor(responses, default=[]))
    report = orch.collect()
    assert report.failed == []
    reg = orch.registry
    assert reg.sample("mssql_up") == 1.0
    assert reg.sample("mssql_product_version") == 16.0
    assert reg.sample("mssql_io_stall_total", {"database": "dbA"}) == 30.0
    assert reg.sample("mssql_io_stall", {"database": "dbA", "type": "queued_write"}) == 8.0
    assert reg.sample("mssql_buffer_cache_hit_ratio") == 50.0


def test_deadline_skips_remaining_collectors(monkeypatch) -> None:
    import orchestrator as orchestrator_module

    # scrape start, first deadline check, first collector start, then 5s later for everything else
    ticks = [0.0, 0.0, 0.0, 5.0]

    def fake_monotonic() -> float:
        return ticks.pop(0) if len(ticks) > 1 else ticks[0]

    monkeypatch.setattr(orchestrator_module.time, "monotonic", fake_monotonic)
    specs = [_scalar("a", "QA"), _scalar("b", "QB"), _scalar("c", "QC")]
    executor = FakeExecutor({"QA": [[1]], "QB": [[2]], "QC": [[3]]})
    orch = CollectionOrchestrator(executor, collectors=specs, deadline_sec=1.0)
    report = orch.collect()
    assert executor.queries == ["QA"]
    assert report.deadline_exceeded is True
    assert report.succeeded == ["a"]
    assert report.skipped == ["b", "c"]
    assert report.failed == []


def test_duplicate_collector_id_is_fatal() -> None:
    with pytest.raises(DuplicateCollectorError):
        CollectionOrchestrator(FakeExecutor(), collectors=[_scalar("a", "Q1"), _scalar("a", "Q2")])


def test_duplicate_metric_name_is_fatal() -> None:
    first = scalar_collector("first", MetricDescriptor("mssql_dup", "x"), "Q1")
    second = scalar_collector("second", MetricDescriptor("mssql_dup", "y"), "Q2")
    with pytest.raises(DuplicateMetricError):
        CollectionOrchestrator(FakeExecutor(), collectors=[first, second])


def test_busy_reject_policy() -> None:
    entered = threading.Event()
    release = threading.Event()

    class BlockingExecutor(FakeExecutor):
        def execute(self, query):
            entered.set()
            release.wait(5)
            return super().execute(query)

    orch = CollectionOrchestrator(
        BlockingExecutor({"QA": [[1]]}), collectors=[_scalar("a", "QA")], busy_policy="reject"
    )
    worker = threading.Thread(target=orch.collect)
    worker.start()
    assert entered.wait(5)
    assert orch.state is OrchestratorState.COLLECTING
    with pytest.raises(ScrapeBusyError):
        orch.collect()
    release.set()
    worker.join(5)
    assert orch.state is OrchestratorState.IDLE
    assert orch.collect().succeeded == ["a"]


def test_invalid_busy_policy() -> None:
    with pytest.raises(ValueError):
        CollectionOrchestrator(FakeExecutor(), collectors=[], busy_policy="drop")


def test_last_report_and_shared_registry() -> None:
    reg = MetricRegistry()
    orch = CollectionOrchestrator(FakeExecutor({"QA": [[1]]}), registry=reg, collectors=[_scalar("a", "QA")])
    assert orch.last_report is None
    report = orch.collect()
    assert orch.last_report is report
    assert orch.registry is reg
