"""Snapshot reconciliation across cgroup v1 and v2 record layouts.

The upstream collector tags each record with the cgroup hierarchy it was
read from and fills only the matching layout. Everything downstream works on
a flat CounterSnapshot, so the layout dispatch happens exactly once, here.
"""

from __future__ import annotations

import logging

from cgroup_membw.core.constants import CGROUP_TYPE_V1, CGROUP_TYPE_V2
from cgroup_membw.core.schemas import CgroupCpuCounters, CgroupStats
from cgroup_membw.monitoring.base import EMPTY_SNAPSHOT, CounterSnapshot

logger = logging.getLogger(__name__)


def _select_cpu_counters(stats: CgroupStats) -> CgroupCpuCounters | None:
    if stats.cgroup_type == CGROUP_TYPE_V1:
        return stats.v1.cpu if stats.v1 is not None else None
    if stats.cgroup_type == CGROUP_TYPE_V2:
        return stats.v2.cpu if stats.v2 is not None else None
    return None


def reconcile_counters(stats: CgroupStats) -> CounterSnapshot:
    """Extract the memory bandwidth counters from a tagged cgroup snapshot.

    Unknown discriminators, or a known discriminator whose layout is absent,
    yield an all-zero snapshot with a zero timestamp. That disables rate
    computation downstream instead of failing the collection loop.

    Args:
        stats: Raw snapshot as produced by the upstream collector

    Returns:
        CounterSnapshot with the selected layout's counters
    """
    cpu = _select_cpu_counters(stats)
    if cpu is None:
        logger.debug(
            f"No usable counters for cgroup_type={stats.cgroup_type!r}, "
            "reconciling to empty snapshot"
        )
        return EMPTY_SNAPSHOT

    return CounterSnapshot(
        read_drams=cpu.ocr_read_drams,
        imc_writes=cpu.imc_writes,
        store_all_ins=cpu.store_all_ins,
        store_ins=cpu.store_ins,
        update_time=cpu.update_time,
    )
