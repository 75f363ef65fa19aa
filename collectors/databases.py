"""
Per-database collectors: state, log growth, file sizes and I/O stalls.
"""
from __future__ import annotations

from collections.abc import Sequence

from collectors.base import CollectorSpec, MetricsHandle, labeled_collector, set_if_number
from models import MetricDescriptor, Row

mssql_database_state = labeled_collector(
    "mssql_database_state",
    MetricDescriptor(
        "mssql_database_state",
        "Databases states: 0=ONLINE 1=RESTORING 2=RECOVERING 3=RECOVERY_PENDING 4=SUSPECT 5=EMERGENCY "
        "6=OFFLINE 7=COPYING 10=OFFLINE_SECONDARY",
        ("database",),
    ),
    "SELECT name,state FROM master.sys.databases",
    label_columns=("database",),
)

mssql_log_growths = labeled_collector(
    "mssql_log_growths",
    MetricDescriptor(
        "mssql_log_growths",
        "Total number of times the transaction log for the database has been expanded last restart",
        ("database",),
    ),
    """SELECT rtrim(instance_name), cntr_value
FROM sys.dm_os_performance_counters 
WHERE counter_name = 'Log Growths' and instance_name <> '_Total'""",
    label_columns=("database",),
)

mssql_database_filesize = labeled_collector(
    "mssql_database_filesize",
    MetricDescriptor(
        "mssql_database_filesize",
        "Physical sizes of files used by database in KB, their names and types "
        "(0=rows, 1=log, 2=filestream,3=n/a 4=fulltext(before v2008 of MSSQL))",
        ("database", "logicalname", "type", "filename"),
    ),
    "SELECT DB_NAME(database_id) AS database_name, name AS logical_name, type, physical_name, "
    "(size * CAST(8 AS BIGINT)) size_kb FROM sys.master_files",
    label_columns=("database", "logicalname", "type", "filename"),
)

# column index of each stall kind in the io_stall projection
IO_STALL_KINDS = (
    ("read", 1),
    ("write", 2),
    ("queued_read", 4),
    ("queued_write", 5),
)


def _collect_io_stall(rows: Sequence[Row], metrics: MetricsHandle) -> None:
    for row in rows:
        database = row.as_string(0)
        set_if_number(metrics["mssql_io_stall_total"], row.as_number(3), {"database": database})
        for kind, index in IO_STALL_KINDS:
            set_if_number(metrics["mssql_io_stall"], row.as_number(index), {"database": database, "type": kind})


mssql_io_stall = CollectorSpec(
    id="mssql_io_stall",
    metrics={
        "mssql_io_stall": MetricDescriptor(
            "mssql_io_stall", "Wait time (ms) of stall since last restart", ("database", "type")
        ),
        "mssql_io_stall_total": MetricDescriptor(
            "mssql_io_stall_total", "Wait time (ms) of stall since last restart", ("database",)
        ),
    },
    query="""SELECT
cast(DB_Name(a.database_id) as varchar) as name,
    max(io_stall_read_ms),
    max(io_stall_write_ms),
    max(io_stall),
    max(io_stall_queued_read_ms),
    max(io_stall_queued_write_ms)
FROM
sys.dm_io_virtual_file_stats(null, null) a
INNER JOIN sys.master_files b ON a.database_id = b.database_id and a.file_id = b.file_id
GROUP BY a.database_id""",
    mapping=_collect_io_stall,
    columns=6,
)
