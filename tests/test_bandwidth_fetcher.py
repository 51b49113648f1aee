"""Tests for MemBandwidthFetcher."""

from datetime import UTC, datetime

import pytest

from cgroup_membw.core.constants import (
    MAX_UPDATE_TIME,
    METRIC_IMC_WRITES_CONTAINER,
    METRIC_MEM_BANDWIDTH_READ_CONTAINER,
    METRIC_MEM_BANDWIDTH_WRITE_CONTAINER,
    METRIC_OCR_READ_DRAMS_CONTAINER,
    METRIC_STORE_ALL_INS_CONTAINER,
    METRIC_STORE_INS_CONTAINER,
)
from cgroup_membw.core.schemas import CgroupStats, ContainerCgroupRecord, MetricData
from cgroup_membw.monitoring.bandwidth_fetcher import MemBandwidthFetcher
from cgroup_membw.storage.in_memory import InMemoryMetricStore

POD = "pod-1"
CONTAINER = "app"


def make_stats(
    update_time: int,
    read_drams: int = 0,
    imc_writes: int = 0,
    store_all_ins: int = 0,
    store_ins: int = 0,
    cgroup_type: str = "V2",
) -> CgroupStats:
    """Build a collector snapshot in the layout named by cgroup_type."""
    cpu = {
        "ocr_read_drams": read_drams,
        "imc_writes": imc_writes,
        "store_all_ins": store_all_ins,
        "store_ins": store_ins,
        "update_time": update_time,
    }
    return CgroupStats.model_validate({"cgroup_type": cgroup_type, cgroup_type: {"cpu": cpu}})


class TestMemBandwidthFetcher:
    """Tests for per-container processing."""

    def test_first_cycle_records_raw_counters_only(self) -> None:
        """Without history no rate is written, but the counters are kept."""
        store = InMemoryMetricStore()
        fetcher = MemBandwidthFetcher(store)

        update = fetcher.process_container(POD, CONTAINER, make_stats(100, read_drams=1000))

        assert update.read_mbps is None
        assert update.write_mbps is None
        assert update.raw_counters_recorded
        rate = store.get_container_metric(POD, CONTAINER, METRIC_MEM_BANDWIDTH_READ_CONTAINER)
        assert rate is None
        raw = store.get_container_metric(POD, CONTAINER, METRIC_OCR_READ_DRAMS_CONTAINER)
        assert raw is not None
        assert raw.value == 1000
        assert raw.time == datetime.fromtimestamp(100, UTC)

    def test_second_cycle_writes_both_rates(self) -> None:
        store = InMemoryMetricStore()
        fetcher = MemBandwidthFetcher(store)

        fetcher.process_container(
            POD,
            CONTAINER,
            make_stats(100, read_drams=0, imc_writes=0, store_all_ins=1000, store_ins=0),
        )
        update = fetcher.process_container(
            POD,
            CONTAINER,
            make_stats(
                102,
                read_drams=16384 * 4,
                imc_writes=1048576,
                store_all_ins=2000,
                store_ins=500,
            ),
        )

        # 4 MB read over 2s; half of 64 MB of IMC writes over 2s
        assert update.read_mbps == pytest.approx(2.0)
        assert update.write_mbps == pytest.approx(16.0)
        assert update.rates_written == 2

        read = store.get_container_metric(POD, CONTAINER, METRIC_MEM_BANDWIDTH_READ_CONTAINER)
        write = store.get_container_metric(POD, CONTAINER, METRIC_MEM_BANDWIDTH_WRITE_CONTAINER)
        assert read.value == pytest.approx(2.0)
        assert write.value == pytest.approx(16.0)
        assert read.time == datetime.fromtimestamp(102, UTC)

    def test_duplicate_sample_is_suppressed(self) -> None:
        """Re-reading an unchanged sample writes no rate and keeps history intact."""
        store = InMemoryMetricStore()
        fetcher = MemBandwidthFetcher(store)

        fetcher.process_container(POD, CONTAINER, make_stats(100, read_drams=10))
        fetcher.process_container(POD, CONTAINER, make_stats(101, read_drams=16394))
        first_rate = store.get_container_metric(
            POD, CONTAINER, METRIC_MEM_BANDWIDTH_READ_CONTAINER
        )

        update = fetcher.process_container(POD, CONTAINER, make_stats(101, read_drams=16394))

        assert update.rates_written == 0
        assert not update.raw_counters_recorded
        assert (
            store.get_container_metric(POD, CONTAINER, METRIC_MEM_BANDWIDTH_READ_CONTAINER)
            == first_rate
        )

    def test_older_sample_does_not_roll_back_history(self) -> None:
        store = InMemoryMetricStore()
        fetcher = MemBandwidthFetcher(store)

        fetcher.process_container(POD, CONTAINER, make_stats(200, read_drams=5000))
        update = fetcher.process_container(POD, CONTAINER, make_stats(150, read_drams=10))

        assert update.rates_written == 0
        assert not update.raw_counters_recorded
        raw = store.get_container_metric(POD, CONTAINER, METRIC_OCR_READ_DRAMS_CONTAINER)
        assert raw.value == 5000
        assert raw.time == datetime.fromtimestamp(200, UTC)

    def test_last_representable_update_time(self) -> None:
        """A sample stamped 9999-12-31T23:59:59Z is processed end to end."""
        store = InMemoryMetricStore()
        fetcher = MemBandwidthFetcher(store)

        fetcher.process_container(POD, CONTAINER, make_stats(MAX_UPDATE_TIME - 1))
        update = fetcher.process_container(
            POD, CONTAINER, make_stats(MAX_UPDATE_TIME, read_drams=16384)
        )

        assert update.read_mbps == pytest.approx(1.0)
        assert update.raw_counters_recorded
        raw = store.get_container_metric(POD, CONTAINER, METRIC_OCR_READ_DRAMS_CONTAINER)
        assert raw.time == datetime.fromtimestamp(MAX_UPDATE_TIME, UTC)
        assert fetcher.load_prior_counters(POD, CONTAINER).update_time == MAX_UPDATE_TIME

    def test_unknown_schema_writes_nothing(self) -> None:
        """An unrecognized record neither writes rates nor clobbers raw counters."""
        store = InMemoryMetricStore()
        fetcher = MemBandwidthFetcher(store)
        fetcher.process_container(POD, CONTAINER, make_stats(100, read_drams=10))

        update = fetcher.process_container(POD, CONTAINER, CgroupStats(cgroup_type="V9"))

        assert update.rates_written == 0
        assert not update.raw_counters_recorded
        raw = store.get_container_metric(POD, CONTAINER, METRIC_OCR_READ_DRAMS_CONTAINER)
        assert raw.value == 10

    def test_counter_reset_reports_zero(self) -> None:
        """A counter reset between cycles reads as zero bandwidth, then recovers."""
        store = InMemoryMetricStore()
        fetcher = MemBandwidthFetcher(store)

        fetcher.process_container(POD, CONTAINER, make_stats(100, read_drams=10**9))
        reset = fetcher.process_container(POD, CONTAINER, make_stats(101, read_drams=0))
        recovered = fetcher.process_container(POD, CONTAINER, make_stats(102, read_drams=16384))

        assert reset.read_mbps == 0
        assert recovered.read_mbps == pytest.approx(1.0)

    def test_v1_and_v2_records_are_interchangeable(self) -> None:
        """A container whose collector switches layout keeps its history."""
        store = InMemoryMetricStore()
        fetcher = MemBandwidthFetcher(store)

        fetcher.process_container(POD, CONTAINER, make_stats(10, read_drams=0, cgroup_type="V1"))
        update = fetcher.process_container(
            POD, CONTAINER, make_stats(11, read_drams=16384, cgroup_type="V2")
        )

        assert update.read_mbps == pytest.approx(1.0)

    def test_record_raw_counters_disabled(self) -> None:
        """With recording disabled, history comes from whoever else writes the store."""
        store = InMemoryMetricStore()
        fetcher = MemBandwidthFetcher(store, record_raw_counters=False)
        prior_time = datetime.fromtimestamp(50, UTC)
        for metric_name, value in (
            (METRIC_OCR_READ_DRAMS_CONTAINER, 0.0),
            (METRIC_IMC_WRITES_CONTAINER, 0.0),
            (METRIC_STORE_ALL_INS_CONTAINER, 0.0),
            (METRIC_STORE_INS_CONTAINER, 0.0),
        ):
            store.set_container_metric(
                POD, CONTAINER, metric_name, MetricData(value=value, time=prior_time)
            )

        update = fetcher.process_container(POD, CONTAINER, make_stats(51, read_drams=16384))

        assert update.read_mbps == pytest.approx(1.0)
        assert not update.raw_counters_recorded
        raw = store.get_container_metric(POD, CONTAINER, METRIC_OCR_READ_DRAMS_CONTAINER)
        assert raw.value == 0

    def test_load_prior_counters_without_time(self) -> None:
        """A stored counter without a timestamp counts as no history."""
        store = InMemoryMetricStore()
        store.set_container_metric(
            POD, CONTAINER, METRIC_OCR_READ_DRAMS_CONTAINER, MetricData(value=123.0)
        )

        prior = MemBandwidthFetcher(store).load_prior_counters(POD, CONTAINER)

        assert prior.read_drams == 123
        assert prior.update_time == 0
        assert not prior.is_valid


class TestProcessCycle:
    """Tests for cycle-level processing."""

    def test_cycle_report_counts(self) -> None:
        store = InMemoryMetricStore()
        fetcher = MemBandwidthFetcher(store)
        first = [
            ContainerCgroupRecord(pod_uid="p1", container_name="a", cgroup=make_stats(100)),
            ContainerCgroupRecord(pod_uid="p2", container_name="b", cgroup=make_stats(100)),
        ]
        second = [
            ContainerCgroupRecord(
                pod_uid="p1", container_name="a", cgroup=make_stats(101, read_drams=16384)
            ),
            ContainerCgroupRecord(pod_uid="p2", container_name="b", cgroup=make_stats(100)),
        ]

        first_report = fetcher.process_cycle(first)
        second_report = fetcher.process_cycle(second)

        assert first_report.to_dict() == {
            "containers_processed": 2,
            "rates_written": 0,
            "rates_skipped": 4,
        }
        assert second_report.rates_written == 2
        assert second_report.rates_skipped == 2
        assert second_report.updates[0].read_mbps == pytest.approx(1.0)
        assert second_report.updates[1].read_mbps is None

    def test_containers_are_independent(self) -> None:
        """History of one container never feeds another's rate."""
        store = InMemoryMetricStore()
        fetcher = MemBandwidthFetcher(store)

        fetcher.process_container("p1", "a", make_stats(100, read_drams=0))
        update = fetcher.process_container("p1", "b", make_stats(101, read_drams=16384))

        assert update.read_mbps is None
