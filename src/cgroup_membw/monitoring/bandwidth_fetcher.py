"""Per-container memory bandwidth processing.

MemBandwidthFetcher ties the pieces together for one collection cycle:
reconcile the collector's snapshot, diff it against the raw counters stored
by the previous cycle, commit the read/write bandwidth rates, and store the
current raw counters for the next cycle.

Calls for the same container must be serialized by the caller; the
store round trip is an unsynchronized read-modify-write.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime

from cgroup_membw.core.constants import (
    METRIC_IMC_WRITES_CONTAINER,
    METRIC_MEM_BANDWIDTH_READ_CONTAINER,
    METRIC_MEM_BANDWIDTH_WRITE_CONTAINER,
    METRIC_OCR_READ_DRAMS_CONTAINER,
    METRIC_STORE_ALL_INS_CONTAINER,
    METRIC_STORE_INS_CONTAINER,
)
from cgroup_membw.core.schemas import CgroupStats, ContainerCgroupRecord, MetricData
from cgroup_membw.monitoring.base import BandwidthUpdate, CounterSnapshot, CycleReport
from cgroup_membw.monitoring.rate_calculator import (
    read_bandwidth_mb,
    set_container_rate_metric,
    write_bandwidth_mb,
)
from cgroup_membw.monitoring.reconciler import reconcile_counters
from cgroup_membw.storage.base import MetricStore
from cgroup_membw.utils.logging import container_extra

logger = logging.getLogger(__name__)


class MemBandwidthFetcher:
    """Computes memory bandwidth rate series from periodic cgroup snapshots.

    The fetcher holds no state of its own: the previous cycle's counters live
    in the injected metric store.
    """

    def __init__(self, store: MetricStore, record_raw_counters: bool = True) -> None:
        """Initialize the fetcher.

        Args:
            store: Metric store holding raw counters and rate series
            record_raw_counters: Store the current raw counters after each
                cycle. Disable when another component already records them.
        """
        self._store = store
        self._record_raw_counters = record_raw_counters

    def _stored_counter(self, pod_uid: str, container_name: str, metric_name: str) -> int:
        data = self._store.get_container_metric(pod_uid, container_name, metric_name)
        if data is None:
            return 0
        # The store holds floats; counters come back truncated like any uint64 cast
        return max(0, int(data.value))

    def load_prior_counters(self, pod_uid: str, container_name: str) -> CounterSnapshot:
        """Rebuild the previous cycle's snapshot from the metric store.

        The prior sample time is taken from the DRAM read counter series. A
        missing series, or one without a timestamp, yields update_time 0,
        which the rate calculator treats as "no history yet".
        """
        read_metric = self._store.get_container_metric(
            pod_uid, container_name, METRIC_OCR_READ_DRAMS_CONTAINER
        )
        prior_time = read_metric.time_seconds if read_metric is not None else 0

        return CounterSnapshot(
            read_drams=self._stored_counter(
                pod_uid, container_name, METRIC_OCR_READ_DRAMS_CONTAINER
            ),
            imc_writes=self._stored_counter(pod_uid, container_name, METRIC_IMC_WRITES_CONTAINER),
            store_all_ins=self._stored_counter(
                pod_uid, container_name, METRIC_STORE_ALL_INS_CONTAINER
            ),
            store_ins=self._stored_counter(pod_uid, container_name, METRIC_STORE_INS_CONTAINER),
            update_time=max(0, prior_time),
        )

    def _store_raw_counters(
        self, pod_uid: str, container_name: str, snapshot: CounterSnapshot
    ) -> None:
        update_time = datetime.fromtimestamp(snapshot.update_time, UTC)
        for metric_name, value in (
            (METRIC_OCR_READ_DRAMS_CONTAINER, snapshot.read_drams),
            (METRIC_IMC_WRITES_CONTAINER, snapshot.imc_writes),
            (METRIC_STORE_ALL_INS_CONTAINER, snapshot.store_all_ins),
            (METRIC_STORE_INS_CONTAINER, snapshot.store_ins),
        ):
            self._store.set_container_metric(
                pod_uid,
                container_name,
                metric_name,
                MetricData(value=float(value), time=update_time),
            )

    def process_container(
        self, pod_uid: str, container_name: str, stats: CgroupStats
    ) -> BandwidthUpdate:
        """Process one container's snapshot for the current cycle.

        Args:
            pod_uid: Pod identifier
            container_name: Container name within the pod
            stats: Raw tagged snapshot from the collector

        Returns:
            BandwidthUpdate describing what was written
        """
        prior = self.load_prior_counters(pod_uid, container_name)
        current = reconcile_counters(stats)

        update = BandwidthUpdate(pod_uid=pod_uid, container_name=container_name)
        update.read_mbps = set_container_rate_metric(
            self._store,
            pod_uid,
            container_name,
            METRIC_MEM_BANDWIDTH_READ_CONTAINER,
            prior,
            current,
            read_bandwidth_mb,
        )
        update.write_mbps = set_container_rate_metric(
            self._store,
            pod_uid,
            container_name,
            METRIC_MEM_BANDWIDTH_WRITE_CONTAINER,
            prior,
            current,
            write_bandwidth_mb,
        )

        # Never roll stored history back to an older or duplicate sample
        is_newer = not prior.is_valid or current.update_time > prior.update_time
        if self._record_raw_counters and current.is_valid and is_newer:
            self._store_raw_counters(pod_uid, container_name, current)
            update.raw_counters_recorded = True

        logger.debug(
            f"Processed {pod_uid}/{container_name}: read={update.read_mbps}, "
            f"write={update.write_mbps}, raw_recorded={update.raw_counters_recorded}",
            extra=container_extra(pod_uid, container_name),
        )
        return update

    def process_cycle(self, records: Iterable[ContainerCgroupRecord]) -> CycleReport:
        """Process every container record of one collection cycle, in order."""
        report = CycleReport()

        for record in records:
            update = self.process_container(record.pod_uid, record.container_name, record.cgroup)
            report.updates.append(update)
            report.containers_processed += 1
            report.rates_written += update.rates_written
            report.rates_skipped += 2 - update.rates_written

        logger.info(
            f"Cycle complete: {report.containers_processed} containers, "
            f"{report.rates_written} rates written, {report.rates_skipped} skipped"
        )
        return report
