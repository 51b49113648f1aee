"""Pydantic schemas for cgroup-membw.

This module defines the data contracts shared across the package: the raw
per-container counter records produced by the upstream collector, the metric
samples held by the metric store, and the fetcher configuration.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from cgroup_membw.core.constants import MAX_UINT64, MAX_UPDATE_TIME


class CgroupCpuCounters(BaseModel):
    """Hardware counters reported in the cpu block of a cgroup record.

    All counters are monotonic unsigned 64-bit values. ``update_time`` is the
    Unix epoch second at which the collector sampled them; 0 means no valid
    sample.
    """

    ocr_read_drams: int = Field(
        default=0, ge=0, le=MAX_UINT64, description="DRAM read requests (64B each)"
    )
    imc_writes: int = Field(
        default=0, ge=0, le=MAX_UINT64, description="Memory controller writes (64B each)"
    )
    store_all_ins: int = Field(
        default=0, ge=0, le=MAX_UINT64, description="All retired store instructions"
    )
    store_ins: int = Field(
        default=0, ge=0, le=MAX_UINT64, description="Instrumented subset of store instructions"
    )
    update_time: int = Field(
        default=0, ge=0, le=MAX_UPDATE_TIME, description="Sample time (epoch seconds)"
    )

    model_config = {"extra": "ignore"}


class CgroupV1Stats(BaseModel):
    """Counters as laid out for a cgroup v1 hierarchy."""

    cpu: CgroupCpuCounters = Field(default_factory=CgroupCpuCounters)

    model_config = {"extra": "ignore"}


class CgroupV2Stats(BaseModel):
    """Counters as laid out for a cgroup v2 (unified) hierarchy."""

    cpu: CgroupCpuCounters = Field(default_factory=CgroupCpuCounters)

    model_config = {"extra": "ignore"}


class CgroupStats(BaseModel):
    """A tagged raw counter snapshot for one container.

    ``cgroup_type`` selects which of ``v1``/``v2`` is populated. Values other
    than ``"V1"`` and ``"V2"`` are accepted here and degrade to an empty
    snapshot during reconciliation rather than failing validation.
    """

    cgroup_type: str = Field(default="", description="Schema discriminator: V1 or V2")
    v1: CgroupV1Stats | None = Field(default=None, alias="V1")
    v2: CgroupV2Stats | None = Field(default=None, alias="V2")

    model_config = {"extra": "ignore", "populate_by_name": True}


class ContainerCgroupRecord(BaseModel):
    """One upstream collector record: a container key plus its snapshot."""

    pod_uid: str = Field(..., min_length=1)
    container_name: str = Field(..., min_length=1)
    cgroup: CgroupStats = Field(default_factory=CgroupStats)


class MetricData(BaseModel):
    """A single value of a named metric series.

    ``time`` is None when the sample carries no timestamp; consumers treat
    that the same as a missing sample. Naive times are taken as UTC.
    """

    value: float = 0.0
    time: datetime | None = None

    @field_validator("time")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    @property
    def time_seconds(self) -> int:
        """Sample time as integer epoch seconds, 0 when absent."""
        if self.time is None:
            return 0
        return int(self.time.timestamp())


class FetcherConfig(BaseModel):
    """Top-level configuration for the bandwidth fetcher and its CLI."""

    state_path: Path = Field(
        default=Path("./membw-state.json"), description="JSON file holding the metric store"
    )
    record_raw_counters: bool = Field(
        default=True, description="Record raw counters so the next cycle can compute rates"
    )
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Emit logs as JSON lines")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the log level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level
