from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Callable, List

from .errors import InvalidInput
from .models import ProcessRecord

# (pid, arrival_time, burst_time, priority)
SAMPLE_WORKLOAD = [
    (1, 0, 10, 3),
    (2, 1, 5, 1),
    (3, 3, 8, 2),
    (4, 5, 2, 4),
    (5, 6, 4, 5),
]


def sample_workload() -> List[ProcessRecord]:
    """
    Built-in five-process batch used when no workload file is given.
    """
    return [
        ProcessRecord(pid=pid, arrival_time=arrival, burst_time=burst, priority=priority)
        for pid, arrival, burst, priority in SAMPLE_WORKLOAD
    ]


def load_workload(path: str | Path) -> List[ProcessRecord]:
    """
    Load a workload from a JSON or CSV file into a list of ProcessRecord objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json(path)
    if suffix == ".csv":
        return _load_csv(path)

    raise InvalidInput(f"Unsupported workload format: {suffix} (use .json or .csv)")


def _load_json(path: Path) -> List[ProcessRecord]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise InvalidInput("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry, convert=_json_int) for entry in raw]


def _load_csv(path: Path) -> List[ProcessRecord]:
    processes: List[ProcessRecord] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(_process_from_mapping(row, convert=int))
    return processes


def _json_int(value) -> int:
    # JSON already carries numbers; floats and booleans are not coerced.
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected an integer, got {value!r}")
    return value


def _process_from_mapping(mapping, convert: Callable[[object], int]) -> ProcessRecord:
    try:
        pid = convert(mapping["pid"])
        arrival_time = convert(mapping["arrival_time"])
        burst_time = convert(mapping["burst_time"])
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidInput(f"Invalid process entry: {mapping!r}") from exc

    priority_val = mapping.get("priority")
    try:
        priority = convert(priority_val) if priority_val not in (None, "") else 0
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"Invalid priority in process entry: {mapping!r}") from exc

    return ProcessRecord(
        pid=pid,
        arrival_time=arrival_time,
        burst_time=burst_time,
        priority=priority,
    )
