"""Port interface for the container metric store.

The rate calculator and the fetcher depend only on this protocol, never on a
concrete store, so tests can substitute an in-memory fake.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from cgroup_membw.core.schemas import MetricData


@runtime_checkable
class MetricStore(Protocol):
    """Key-value history of named metrics per container.

    Keys are ``(pod_uid, container_name, metric_name)``. Implementations must
    be safe for concurrent access across different keys.
    """

    def get_container_metric(
        self, pod_uid: str, container_name: str, metric_name: str
    ) -> MetricData | None:
        """Return the most recent sample for a key, or None if never written."""
        ...

    def set_container_metric(
        self, pod_uid: str, container_name: str, metric_name: str, data: MetricData
    ) -> None:
        """Record a new sample for a key."""
        ...
