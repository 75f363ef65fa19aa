"""
Collectors package: the ordered set of SQL Server collector declarations.
"""
from __future__ import annotations

from collectors.activity import (
    mssql_batch_requests,
    mssql_deadlocks,
    mssql_full_scans,
    mssql_kill_connection_errors,
    mssql_sql_compilations,
    mssql_transactions,
    mssql_user_errors,
)
from collectors.base import CollectorSpec, set_if_number, publish_ratio
from collectors.connections import mssql_client_connections, mssql_connections
from collectors.databases import mssql_database_filesize, mssql_database_state, mssql_io_stall, mssql_log_growths
from collectors.instance import mssql_instance_local_time, mssql_product_version, mssql_up
from collectors.memory import (
    mssql_buffer_cache_hit_ratio,
    mssql_buffer_manager,
    mssql_os_process_memory,
    mssql_os_sys_memory,
    mssql_plan_cache_hit_ratio,
)
from collectors.replication import mssql_ag_sync_lag

COLLECTORS: tuple[CollectorSpec, ...] = (
    mssql_up,
    mssql_product_version,
    mssql_instance_local_time,
    mssql_connections,
    mssql_client_connections,
    mssql_deadlocks,
    mssql_user_errors,
    mssql_kill_connection_errors,
    mssql_database_state,
    mssql_log_growths,
    mssql_database_filesize,
    mssql_buffer_manager,
    mssql_io_stall,
    mssql_batch_requests,
    mssql_transactions,
    mssql_os_process_memory,
    mssql_os_sys_memory,
    mssql_buffer_cache_hit_ratio,
    mssql_full_scans,
    mssql_plan_cache_hit_ratio,
    mssql_sql_compilations,
    mssql_ag_sync_lag,
)


def get_collector(collector_id: str) -> CollectorSpec:
    for spec in COLLECTORS:
        if spec.id == collector_id:
            return spec
    raise KeyError(collector_id)


__all__ = [
    "COLLECTORS",
    "CollectorSpec",
    "get_collector",
    "publish_ratio",
    "set_if_number",
]
