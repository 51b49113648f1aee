"""Plain data containers shared by the reconciler, calculator and fetcher."""

from __future__ import annotations

from dataclasses import dataclass, field

from cgroup_membw.core.constants import MAX_UPDATE_TIME


@dataclass(frozen=True)
class CounterSnapshot:
    """Flat, schema-independent view of one container's raw counters.

    An ``update_time`` of 0, or one past ``MAX_UPDATE_TIME``, means the
    snapshot carries no valid sample.
    """

    read_drams: int = 0
    imc_writes: int = 0
    store_all_ins: int = 0
    store_ins: int = 0
    update_time: int = 0  # Epoch seconds

    @property
    def is_valid(self) -> bool:
        return 0 < self.update_time <= MAX_UPDATE_TIME


EMPTY_SNAPSHOT = CounterSnapshot()


@dataclass
class BandwidthUpdate:
    """Outcome of processing one container in one collection cycle.

    Rates are None when the suppression guard skipped the write.
    """

    pod_uid: str
    container_name: str
    read_mbps: float | None = None
    write_mbps: float | None = None
    raw_counters_recorded: bool = False

    @property
    def rates_written(self) -> int:
        return sum(rate is not None for rate in (self.read_mbps, self.write_mbps))


@dataclass
class CycleReport:
    """Aggregated outcome of one collection cycle over many containers."""

    containers_processed: int = 0
    rates_written: int = 0
    rates_skipped: int = 0
    updates: list[BandwidthUpdate] = field(default_factory=list)

    def to_dict(self) -> dict[str, int]:
        """Convert the counts to a dictionary for logging/serialization."""
        return {
            "containers_processed": self.containers_processed,
            "rates_written": self.rates_written,
            "rates_skipped": self.rates_skipped,
        }
