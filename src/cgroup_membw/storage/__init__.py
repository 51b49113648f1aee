"""Storage module - metric store port and implementations."""

from __future__ import annotations

from cgroup_membw.storage.base import MetricStore
from cgroup_membw.storage.in_memory import InMemoryMetricStore
from cgroup_membw.storage.json_file import JsonFileMetricStore

__all__ = ["InMemoryMetricStore", "JsonFileMetricStore", "MetricStore"]
