"""JSON-file persisted metric store.

Lets the CLI carry raw counters from one invocation to the next, so that a
cron-style caller can compute rates across runs.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from cgroup_membw.core.schemas import MetricData
from cgroup_membw.storage.in_memory import InMemoryMetricStore

logger = logging.getLogger(__name__)

STATE_VERSION = 1


class JsonFileMetricStore(InMemoryMetricStore):
    """Metric store backed by a JSON document on disk.

    Reads and writes go to memory; ``load()`` and ``save()`` move the whole
    state to and from ``path``.

    File layout::

        {"version": 1,
         "metrics": [{"pod_uid": ..., "container_name": ..., "metric_name": ...,
                      "value": 1.5, "time": "2024-01-01T00:00:10+00:00"}]}
    """

    def __init__(self, path: Path | str) -> None:
        super().__init__()
        self.path = Path(path)

    def load(self) -> None:
        """Replace in-memory state with the contents of ``path``.

        A missing file leaves the store empty.

        Raises:
            ValueError: If the file is not a valid state document
        """
        if not self.path.exists():
            logger.debug(f"No state file at {self.path}, starting empty")
            return

        try:
            with open(self.path, encoding="utf-8") as f:
                document = json.load(f)
            entries = document["metrics"]
            loaded = {
                (e["pod_uid"], e["container_name"], e["metric_name"]): MetricData(
                    value=e["value"], time=e.get("time")
                )
                for e in entries
            }
        except (json.JSONDecodeError, KeyError, TypeError, ValidationError) as e:
            raise ValueError(f"Corrupt metric state file {self.path}: {e}") from e

        with self._lock:
            self._metrics = loaded
        logger.debug(f"Loaded {len(loaded)} metric series from {self.path}")

    def save(self) -> Path:
        """Write the in-memory state to ``path`` and return it."""
        entries = [
            {
                "pod_uid": pod_uid,
                "container_name": container_name,
                "metric_name": metric_name,
                "value": data.value,
                "time": data.time.isoformat() if data.time is not None else None,
            }
            for (pod_uid, container_name, metric_name), data in self.items()
        ]

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump({"version": STATE_VERSION, "metrics": entries}, f, indent=2)
        tmp_path.replace(self.path)

        logger.debug(f"Saved {len(entries)} metric series to {self.path}")
        return self.path
