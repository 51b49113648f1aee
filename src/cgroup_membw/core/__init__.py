"""Core module - configuration, constants and schemas."""

from __future__ import annotations

from cgroup_membw.core.config import load_config, load_records
from cgroup_membw.core.constants import (
    CGROUP_TYPE_V1,
    CGROUP_TYPE_V2,
    METRIC_MEM_BANDWIDTH_READ_CONTAINER,
    METRIC_MEM_BANDWIDTH_WRITE_CONTAINER,
)
from cgroup_membw.core.schemas import (
    CgroupCpuCounters,
    CgroupStats,
    CgroupV1Stats,
    CgroupV2Stats,
    ContainerCgroupRecord,
    FetcherConfig,
    MetricData,
)

__all__ = [
    "CGROUP_TYPE_V1",
    "CGROUP_TYPE_V2",
    "CgroupCpuCounters",
    "CgroupStats",
    "CgroupV1Stats",
    "CgroupV2Stats",
    "ContainerCgroupRecord",
    "FetcherConfig",
    "load_config",
    "load_records",
    "METRIC_MEM_BANDWIDTH_READ_CONTAINER",
    "METRIC_MEM_BANDWIDTH_WRITE_CONTAINER",
    "MetricData",
]
