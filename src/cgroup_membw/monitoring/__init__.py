"""Monitoring module - memory bandwidth rate computation for containers.

Provides:
- reconcile_counters: cgroup v1/v2 snapshot normalization
- rate_calculator: wraparound-safe deltas, suppression guard and rate commit
- MemBandwidthFetcher: per-container, per-cycle orchestration
"""

from __future__ import annotations

from cgroup_membw.monitoring.bandwidth_fetcher import MemBandwidthFetcher
from cgroup_membw.monitoring.base import (
    EMPTY_SNAPSHOT,
    BandwidthUpdate,
    CounterSnapshot,
    CycleReport,
)
from cgroup_membw.monitoring.rate_calculator import (
    RateFormula,
    read_bandwidth_mb,
    set_container_rate_metric,
    time_delta_seconds,
    uint64_counter_delta,
    write_bandwidth_mb,
)
from cgroup_membw.monitoring.reconciler import reconcile_counters

__all__ = [
    "BandwidthUpdate",
    "CounterSnapshot",
    "CycleReport",
    "EMPTY_SNAPSHOT",
    "MemBandwidthFetcher",
    "RateFormula",
    "read_bandwidth_mb",
    "reconcile_counters",
    "set_container_rate_metric",
    "time_delta_seconds",
    "uint64_counter_delta",
    "write_bandwidth_mb",
]
