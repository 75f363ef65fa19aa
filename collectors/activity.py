"""
Workload collectors read from sys.dm_os_performance_counters: errors, deadlocks,
batches, transactions, scans and compilations.
"""
from __future__ import annotations

from collections.abc import Sequence

from collectors.base import (
    CollectorSpec,
    MetricsHandle,
    labeled_collector,
    pivot_collector,
    scalar_collector,
    set_if_number,
)
from models import MetricDescriptor, Row

mssql_deadlocks = scalar_collector(
    "mssql_deadlocks",
    MetricDescriptor(
        "mssql_deadlocks",
        "Number of lock requests per second that resulted in a deadlock since last restart",
    ),
    """SELECT cntr_value
FROM sys.dm_os_performance_counters
WHERE counter_name = 'Number of Deadlocks/sec' AND instance_name = '_Total'""",
    key="mssql_deadlocks_per_second",
)

mssql_user_errors = scalar_collector(
    "mssql_user_errors",
    MetricDescriptor("mssql_user_errors", "Number of user errors/sec since last restart"),
    """SELECT cntr_value
FROM sys.dm_os_performance_counters
WHERE counter_name = 'Errors/sec' AND instance_name = 'User Errors'""",
)

mssql_kill_connection_errors = scalar_collector(
    "mssql_kill_connection_errors",
    MetricDescriptor("mssql_kill_connection_errors", "Number of kill connection errors/sec since last restart"),
    """SELECT cntr_value
FROM sys.dm_os_performance_counters
WHERE counter_name = 'Errors/sec' AND instance_name = 'Kill Connection Errors'""",
)


def _collect_batch_requests(rows: Sequence[Row], metrics: MetricsHandle) -> None:
    # last row wins if the counter ever comes back more than once
    for row in rows:
        set_if_number(metrics["mssql_batch_requests"], row.as_number(0))


mssql_batch_requests = CollectorSpec(
    id="mssql_batch_requests",
    metrics={
        "mssql_batch_requests": MetricDescriptor(
            "mssql_batch_requests",
            "Number of Transact-SQL command batches received per second. This statistic is affected by all "
            "constraints (such as I/O, number of users, cachesize, complexity of requests, and so on). "
            "High batch requests mean good throughput",
        ),
    },
    query="""SELECT TOP 1 cntr_value
FROM sys.dm_os_performance_counters 
WHERE counter_name = 'Batch Requests/sec'""",
    mapping=_collect_batch_requests,
    columns=1,
)

mssql_transactions = labeled_collector(
    "mssql_transactions",
    MetricDescriptor(
        "mssql_transactions",
        "Number of transactions started for the database per second. Transactions/sec does not count "
        "XTP-only transactions (transactions started by a natively compiled stored procedure.)",
        ("database",),
    ),
    """SELECT rtrim(instance_name), cntr_value
FROM sys.dm_os_performance_counters
WHERE counter_name = 'Transactions/sec' AND instance_name <> '_Total'""",
    label_columns=("database",),
)

mssql_full_scans = scalar_collector(
    "mssql_full_scans",
    MetricDescriptor("mssql_full_scans", "Full table scans per second"),
    """SELECT cntr_value
  FROM sys.dm_os_performance_counters
  WHERE counter_name = 'Full Scans/sec'
    AND object_name = 'SQLServer:Access Methods'""",
)

mssql_sql_compilations = pivot_collector(
    "mssql_sql_compilations",
    [
        ("mssql_sql_compilations", MetricDescriptor("mssql_sql_compilations", "Number of SQL compilations per second")),
        ("mssql_sql_recompilations", MetricDescriptor("mssql_sql_recompilations", "Number of SQL recompilations per second")),
        (
            "mssql_forced_parameterizations",
            MetricDescriptor("mssql_forced_parameterizations", "Number of forced parameterizations per second"),
        ),
        (
            "mssql_auto_param_attempts",
            MetricDescriptor("mssql_auto_param_attempts", "Number of auto-parameterization attempts per second"),
        ),
        (
            "mssql_failed_auto_params",
            MetricDescriptor("mssql_failed_auto_params", "Number of failed auto-parameterizations per second"),
        ),
        (
            "mssql_safe_auto_params",
            MetricDescriptor("mssql_safe_auto_params", "Number of safe auto-parameterizations per second"),
        ),
        (
            "mssql_unsafe_auto_params",
            MetricDescriptor("mssql_unsafe_auto_params", "Number of unsafe auto-parameterizations per second"),
        ),
    ],
    """SELECT
    SUM(CASE WHEN counter_name = 'SQL Compilations/sec' THEN cntr_value ELSE 0 END) AS compilations,
    SUM(CASE WHEN counter_name = 'SQL Re-Compilations/sec' THEN cntr_value ELSE 0 END) AS recompilations,
    SUM(CASE WHEN counter_name = 'Forced Parameterizations/sec' THEN cntr_value ELSE 0 END) AS forced_params,
    SUM(CASE WHEN counter_name = 'Auto-Param Attempts/sec' THEN cntr_value ELSE 0 END) AS auto_param_attempts,
    SUM(CASE WHEN counter_name = 'Failed Auto-Params/sec' THEN cntr_value ELSE 0 END) AS failed_auto_params,
    SUM(CASE WHEN counter_name = 'Safe Auto-Params/sec' THEN cntr_value ELSE 0 END) AS safe_auto_params,
    SUM(CASE WHEN counter_name = 'Unsafe Auto-Params/sec' THEN cntr_value ELSE 0 END) AS unsafe_auto_params
  FROM sys.dm_os_performance_counters
  WHERE object_name = 'SQLServer:SQL Statistics'
    AND counter_name IN (
      'SQL Compilations/sec',
      'SQL Re-Compilations/sec',
      'Forced Parameterizations/sec',
      'Auto-Param Attempts/sec',
      'Failed Auto-Params/sec',
      'Safe Auto-Params/sec',
      'Unsafe Auto-Params/sec'
    )""",
)
