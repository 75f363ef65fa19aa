"""
Availability Group collectors.
"""
from __future__ import annotations

from collectors.base import labeled_collector
from models import MetricDescriptor

mssql_ag_sync_lag = labeled_collector(
    "mssql_ag_sync_lag",
    MetricDescriptor(
        "mssql_ag_sync_lag_secs",
        "Synchronization lag in seconds between primary and secondary replicas in Availability Group",
        ("database", "replica", "sync_state"),
    ),
    """SELECT 
    db_name(database_id) as database_name,
    replica_server_name,
    synchronization_state_desc,
    secondary_lag_seconds
  FROM sys.dm_hadr_database_replica_states drs
  JOIN sys.availability_replicas ar ON drs.replica_id = ar.replica_id
  WHERE is_local = 0""",
    label_columns=("database", "replica", "sync_state"),
)
