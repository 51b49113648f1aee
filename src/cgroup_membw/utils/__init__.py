"""Utils module - Shared utilities."""

from __future__ import annotations

from cgroup_membw.utils.logging import JsonFormatter, container_extra, setup_logging

__all__ = ["JsonFormatter", "container_extra", "setup_logging"]
