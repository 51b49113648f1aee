"""In-memory implementation of the container metric store."""

from __future__ import annotations

import threading

from cgroup_membw.core.schemas import MetricData

MetricKey = tuple[str, str, str]


class InMemoryMetricStore:
    """In-memory implementation of MetricStore.

    Keeps only the latest sample per (pod, container, metric) key. Suitable
    for tests and for single-process use where persistence is not required.
    """

    def __init__(self) -> None:
        self._metrics: dict[MetricKey, MetricData] = {}
        self._lock = threading.Lock()

    def get_container_metric(
        self, pod_uid: str, container_name: str, metric_name: str
    ) -> MetricData | None:
        with self._lock:
            return self._metrics.get((pod_uid, container_name, metric_name))

    def set_container_metric(
        self, pod_uid: str, container_name: str, metric_name: str, data: MetricData
    ) -> None:
        with self._lock:
            self._metrics[(pod_uid, container_name, metric_name)] = data

    def items(self) -> list[tuple[MetricKey, MetricData]]:
        """Return a sorted copy of all stored samples."""
        with self._lock:
            return sorted(self._metrics.items())

    def __len__(self) -> int:
        with self._lock:
            return len(self._metrics)
