"""
Instance-level collectors: availability, product version and server clock.
"""
from __future__ import annotations

from collections.abc import Sequence

from collectors.base import CollectorSpec, MetricsHandle, first_row, scalar_collector, set_if_number
from models import MetricDescriptor, Row
from version import parse_product_version

mssql_up = scalar_collector(
    "mssql_up",
    MetricDescriptor("mssql_up", "UP Status"),
    "SELECT 1",
)


def _collect_product_version(rows: Sequence[Row], metrics: MetricsHandle) -> None:
    row = first_row(rows)
    if row is None:
        return
    version = parse_product_version(row.as_string(0))
    set_if_number(metrics["mssql_product_version"], version.number)


mssql_product_version = CollectorSpec(
    id="mssql_product_version",
    metrics={
        "mssql_product_version": MetricDescriptor("mssql_product_version", "Instance version (Major.Minor)"),
    },
    query="""SELECT CONVERT(VARCHAR(128), SERVERPROPERTY ('productversion')) AS ProductVersion,
  SERVERPROPERTY('ProductVersion') AS ProductVersion
""",
    mapping=_collect_product_version,
    columns=2,
)

mssql_instance_local_time = scalar_collector(
    "mssql_instance_local_time",
    MetricDescriptor("mssql_instance_local_time", "Number of seconds since epoch on local instance"),
    "SELECT DATEDIFF(second, '19700101', GETUTCDATE())",
)
