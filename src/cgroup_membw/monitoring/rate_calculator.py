"""Rate computation for memory bandwidth series.

Turns two time-stamped CounterSnapshots into a per-second rate and writes
it to the metric store, unless no new sample interval exists.

Functions:
    uint64_counter_delta: Wraparound-safe counter difference
    time_delta_seconds: Suppression guard on the two sample times
    read_bandwidth_mb: Megabytes read between two snapshots
    write_bandwidth_mb: Megabytes written between two snapshots
    set_container_rate_metric: Guard, compute and commit one rate sample
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from cgroup_membw.core.constants import BYTES_PER_MB, CACHE_LINE_BYTES, MAX_UPDATE_TIME
from cgroup_membw.core.schemas import MetricData
from cgroup_membw.monitoring.base import CounterSnapshot
from cgroup_membw.storage.base import MetricStore
from cgroup_membw.utils.logging import container_extra

logger = logging.getLogger(__name__)

# Computes the numerator (megabytes) of a rate from the prior and current snapshot
RateFormula = Callable[[CounterSnapshot, CounterSnapshot], float]


def uint64_counter_delta(previous: int, current: int) -> int:
    """Return the increase of an unsigned 64-bit counter.

    A counter that went backwards has either wrapped past its maximum or been
    reset. The true increment cannot be recovered without knowing the upper
    bound, so 0 is reported instead of a negative or huge value.
    """
    if current >= previous:
        return current - previous
    return 0


def time_delta_seconds(prior_time_sec: int, current_time_sec: int) -> int | None:
    """Return the sample interval, or None if no rate should be written.

    None is returned when:
    - prior_time_sec == 0: no previous sample to diff against
    - the delta is 0: the collector has not produced a new sample yet
      (sampling lag between it and this consumer)
    - the delta is negative: illegal, never turned into a negative rate
    - current_time_sec is past MAX_UPDATE_TIME: not representable as a
      sample timestamp
    """
    delta = current_time_sec - prior_time_sec
    if prior_time_sec == 0 or delta <= 0 or current_time_sec > MAX_UPDATE_TIME:
        return None
    return delta


def read_bandwidth_mb(prior: CounterSnapshot, current: CounterSnapshot) -> float:
    """Megabytes read from DRAM between two snapshots."""
    read_drams_inc = uint64_counter_delta(prior.read_drams, current.read_drams)
    return float(read_drams_inc) * CACHE_LINE_BYTES / BYTES_PER_MB


def write_bandwidth_mb(prior: CounterSnapshot, current: CounterSnapshot) -> float:
    """Megabytes written between two snapshots.

    IMC writes are not split per workload, so they are apportioned by the
    share of instrumented store instructions among all stores. With no store
    activity there is nothing to attribute and the result is 0.
    """
    store_all_ins_inc = uint64_counter_delta(prior.store_all_ins, current.store_all_ins)
    if store_all_ins_inc == 0:
        return 0.0

    store_ins_inc = uint64_counter_delta(prior.store_ins, current.store_ins)
    imc_writes_inc = uint64_counter_delta(prior.imc_writes, current.imc_writes)

    # Operation order matters for float results consumed by existing dashboards
    return (
        float(store_ins_inc)
        / float(store_all_ins_inc)
        / BYTES_PER_MB
        * float(imc_writes_inc)
        * CACHE_LINE_BYTES
    )


def set_container_rate_metric(
    store: MetricStore,
    pod_uid: str,
    container_name: str,
    metric_name: str,
    prior: CounterSnapshot,
    current: CounterSnapshot,
    rate_formula: RateFormula,
) -> float | None:
    """Compute a per-second rate and record it, unless the sample is stale.

    The time guard is evaluated first; ``rate_formula`` is only called once
    it passes. At most one sample is written, stamped with the current
    snapshot's time.

    Args:
        store: Metric store receiving the rate sample
        pod_uid: Pod identifier of the container
        container_name: Container name within the pod
        metric_name: Name of the rate series
        prior: Snapshot from the previous cycle (update_time 0 if none)
        current: Freshly reconciled snapshot
        rate_formula: Computes the numerator from the two snapshots

    Returns:
        The rate written, or None if the write was suppressed
    """
    time_delta = time_delta_seconds(prior.update_time, current.update_time)
    if time_delta is None:
        logger.debug(
            f"Skipping {metric_name} for {pod_uid}/{container_name}: "
            f"prior_time={prior.update_time}, current_time={current.update_time}",
            extra=container_extra(pod_uid, container_name, metric_name=metric_name),
        )
        return None

    rate = rate_formula(prior, current) / time_delta
    store.set_container_metric(
        pod_uid,
        container_name,
        metric_name,
        MetricData(value=rate, time=datetime.fromtimestamp(current.update_time, UTC)),
    )
    return rate
