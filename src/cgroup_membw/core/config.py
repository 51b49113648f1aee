"""Configuration and input record loading.

Supports YAML and JSON configuration files with schema validation, plus
JSON, YAML and JSON Lines files of upstream collector records.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from cgroup_membw.core.schemas import ContainerCgroupRecord, FetcherConfig


def _read_structured(path: Path) -> Any:
    """Read a YAML or JSON document, dispatching on the file suffix."""
    suffix = path.suffix.lower()
    if suffix not in (".yaml", ".yml", ".json"):
        raise ValueError(f"Unsupported config format: {suffix}. Use .yaml, .yml, or .json")

    with open(path, encoding="utf-8") as f:
        if suffix == ".json":
            return json.load(f)
        return yaml.safe_load(f)


def load_config(path: Path | str) -> FetcherConfig:
    """Load and validate a fetcher configuration file.

    Args:
        path: Path to YAML or JSON configuration file

    Returns:
        Validated FetcherConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is unsupported
        pydantic.ValidationError: If config is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    data = _read_structured(path)
    return FetcherConfig.model_validate(data or {})


def load_records(path: Path | str) -> list[ContainerCgroupRecord]:
    """Load upstream collector records from a file.

    Accepted shapes:
        - ``.jsonl``: one record per line (blank lines ignored)
        - ``.json``/``.yaml``/``.yml``: a list of records, or a mapping with
          a ``containers`` list

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the format or document shape is unsupported
        pydantic.ValidationError: If a record is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    if path.suffix.lower() == ".jsonl":
        records = []
        with open(path, encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    data = json.loads(line)
                except json.JSONDecodeError as e:
                    raise ValueError(f"Invalid JSON on line {line_no} of {path}: {e}") from e
                records.append(ContainerCgroupRecord.model_validate(data))
        return records

    data = _read_structured(path)
    if isinstance(data, dict):
        data = data.get("containers")
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of container records in {path}")

    return [ContainerCgroupRecord.model_validate(item) for item in data]
