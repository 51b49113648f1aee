"""Shared constants for cgroup-membw.

Metric names and unit conversions used by the reconciler, the rate
calculator and the fetcher.
"""

from __future__ import annotations

# Cgroup schema discriminators as reported by the upstream collector
CGROUP_TYPE_V1 = "V1"
CGROUP_TYPE_V2 = "V2"

# Largest value an unsigned 64-bit hardware counter can hold
MAX_UINT64 = 2**64 - 1

# Latest representable sample time (9999-12-31T23:59:59Z)
MAX_UPDATE_TIME = 253402300799

# Each DRAM read request / IMC write moves one 64-byte cache line
CACHE_LINE_BYTES = 64

BYTES_PER_MB = 1024 * 1024

# Derived rate series (MB/s)
METRIC_MEM_BANDWIDTH_READ_CONTAINER = "mem.bandwidth.read.container"
METRIC_MEM_BANDWIDTH_WRITE_CONTAINER = "mem.bandwidth.write.container"

# Raw counter series, kept so the next cycle has something to diff against
METRIC_OCR_READ_DRAMS_CONTAINER = "cpu.ocr.read.drams.container"
METRIC_IMC_WRITES_CONTAINER = "cpu.imc.writes.container"
METRIC_STORE_ALL_INS_CONTAINER = "cpu.store.all.ins.container"
METRIC_STORE_INS_CONTAINER = "cpu.store.ins.container"
