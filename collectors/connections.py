"""
Connection collectors: sessions per database and per client host.
"""
from __future__ import annotations

from collectors.base import labeled_collector
from models import MetricDescriptor

mssql_connections = labeled_collector(
    "mssql_connections",
    MetricDescriptor("mssql_connections", "Number of active connections", ("database", "state")),
    """SELECT DB_NAME(sP.dbid)
        , COUNT(sP.spid)
FROM sys.sysprocesses sP
GROUP BY DB_NAME(sP.dbid)""",
    label_columns=("database",),
    static_labels={"state": "current"},
)

mssql_client_connections = labeled_collector(
    "mssql_client_connections",
    MetricDescriptor("mssql_client_connections", "Number of active client connections", ("client", "database")),
    """SELECT host_name, DB_NAME(dbid) dbname, COUNT(*) session_count
FROM sys.dm_exec_sessions a
LEFT JOIN sysprocesses b on a.session_id=b.spid
WHERE is_user_process=1
GROUP BY host_name, dbid""",
    label_columns=("client", "database"),
)
