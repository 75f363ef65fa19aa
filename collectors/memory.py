"""
Memory collectors: buffer manager counters, process and OS memory, cache hit ratios.
"""
from __future__ import annotations

from collectors.base import pivot_collector, ratio_collector
from models import MetricDescriptor

mssql_buffer_manager = pivot_collector(
    "mssql_buffer_manager",
    [
        ("mssql_page_read_total", MetricDescriptor("mssql_page_read_total", "Page reads/sec")),
        ("mssql_page_write_total", MetricDescriptor("mssql_page_write_total", "Page writes/sec")),
        (
            "mssql_page_life_expectancy",
            MetricDescriptor(
                "mssql_page_life_expectancy",
                "Indicates the minimum number of seconds a page will stay in the buffer pool on this node "
                "without references. The traditional advice from Microsoft used to be that the PLE should "
                "remain above 300 seconds",
            ),
        ),
        ("mssql_lazy_write_total", MetricDescriptor("mssql_lazy_write_total", "Lazy writes/sec")),
        ("mssql_page_checkpoint_total", MetricDescriptor("mssql_page_checkpoint_total", "Checkpoint pages/sec")),
    ],
    """SELECT * FROM 
        (
            SELECT rtrim(counter_name) as counter_name, cntr_value
            FROM sys.dm_os_performance_counters
            WHERE counter_name in ('Page reads/sec', 'Page writes/sec', 'Page life expectancy', 'Lazy writes/sec', 'Checkpoint pages/sec')
            AND object_name = 'SQLServer:Buffer Manager'
        ) d
        PIVOT
        (
        MAX(cntr_value)
        FOR counter_name IN ([Page reads/sec], [Page writes/sec], [Page life expectancy], [Lazy writes/sec], [Checkpoint pages/sec])
        ) piv
    """,
)

mssql_os_process_memory = pivot_collector(
    "mssql_os_process_memory",
    [
        ("mssql_page_fault_count", MetricDescriptor("mssql_page_fault_count", "Number of page faults since last restart")),
        (
            "mssql_memory_utilization_percentage",
            MetricDescriptor("mssql_memory_utilization_percentage", "Percentage of memory utilization"),
        ),
    ],
    """SELECT page_fault_count, memory_utilization_percentage 
FROM sys.dm_os_process_memory""",
)

mssql_os_sys_memory = pivot_collector(
    "mssql_os_sys_memory",
    [
        ("mssql_total_physical_memory_kb", MetricDescriptor("mssql_total_physical_memory_kb", "Total physical memory in KB")),
        (
            "mssql_available_physical_memory_kb",
            MetricDescriptor("mssql_available_physical_memory_kb", "Available physical memory in KB"),
        ),
        ("mssql_total_page_file_kb", MetricDescriptor("mssql_total_page_file_kb", "Total page file in KB")),
        ("mssql_available_page_file_kb", MetricDescriptor("mssql_available_page_file_kb", "Available page file in KB")),
    ],
    """SELECT total_physical_memory_kb, available_physical_memory_kb, total_page_file_kb, available_page_file_kb 
FROM sys.dm_os_sys_memory""",
)

mssql_buffer_cache_hit_ratio = ratio_collector(
    "mssql_buffer_cache_hit_ratio",
    MetricDescriptor("mssql_buffer_cache_hit_ratio", "Buffer cache hit ratio percentage"),
    """SELECT 
    a.cntr_value AS hit_ratio,
    b.cntr_value AS hit_ratio_base
  FROM sys.dm_os_performance_counters a
  JOIN sys.dm_os_performance_counters b 
    ON a.object_name = b.object_name 
  WHERE a.counter_name = 'Buffer cache hit ratio'
    AND b.counter_name = 'Buffer cache hit ratio base'""",
    key="mssql_cache_hit_ratio",
)

mssql_plan_cache_hit_ratio = ratio_collector(
    "mssql_plan_cache_hit_ratio",
    MetricDescriptor("mssql_plan_cache_hit_ratio", "Plan Cache hit ratio percentage"),
    """SELECT 
    a.cntr_value AS hit_ratio,
    b.cntr_value AS hit_ratio_base
  FROM sys.dm_os_performance_counters a
  JOIN sys.dm_os_performance_counters b 
    ON a.object_name = b.object_name
    AND a.instance_name = b.instance_name
  WHERE a.counter_name = 'Cache Hit Ratio'
    AND b.counter_name = 'Cache Hit Ratio Base'
    AND a.object_name = 'SQLServer:Plan Cache'
    AND a.instance_name = '_Total'""",
)
