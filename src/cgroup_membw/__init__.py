"""cgroup-membw - Container memory bandwidth rates from cgroup hardware counters."""

from __future__ import annotations

from cgroup_membw.core.schemas import CgroupStats, ContainerCgroupRecord, FetcherConfig, MetricData
from cgroup_membw.monitoring import (
    CounterSnapshot,
    MemBandwidthFetcher,
    reconcile_counters,
    set_container_rate_metric,
)
from cgroup_membw.storage import InMemoryMetricStore, JsonFileMetricStore, MetricStore

__version__ = "0.1.0"

__all__ = [
    "CgroupStats",
    "ContainerCgroupRecord",
    "CounterSnapshot",
    "FetcherConfig",
    "InMemoryMetricStore",
    "JsonFileMetricStore",
    "MemBandwidthFetcher",
    "MetricData",
    "MetricStore",
    "reconcile_counters",
    "set_container_rate_metric",
    "__version__",
]
