from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass
class ProcessRecord:
    """
    One process of a batch: input fields plus the simulation state a policy
    run fills in. Derived fields stay ``None`` until the run sets them.
    """

    pid: int
    arrival_time: int
    burst_time: int
    priority: int = 0
    remaining_time: int = field(init=False)
    completion_time: Optional[int] = field(default=None, init=False)
    turnaround_time: Optional[int] = field(default=None, init=False)
    waiting_time: Optional[int] = field(default=None, init=False)
    response_time: Optional[int] = field(default=None, init=False)
    # Weak reference to the policy holding this record, if any.
    owner_ref: Optional[weakref.ref] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.remaining_time = self.burst_time

    @property
    def owner(self) -> Optional[Any]:
        """Policy currently holding this record; released once it runs or is discarded."""
        return self.owner_ref() if self.owner_ref is not None else None

    @property
    def is_finished(self) -> bool:
        return self.completion_time is not None

    @property
    def is_pristine(self) -> bool:
        return (
            self.remaining_time == self.burst_time
            and self.response_time is None
            and self.completion_time is None
        )

    def fresh_copy(self) -> "ProcessRecord":
        return ProcessRecord(
            pid=self.pid,
            arrival_time=self.arrival_time,
            burst_time=self.burst_time,
            priority=self.priority,
        )


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: int
    start_time: int
    end_time: int

    @property
    def length(self) -> int:
        return self.end_time - self.start_time


@dataclass
class RunMetrics:
    average_waiting_time: float
    average_turnaround_time: float
    average_response_time: float
    throughput: float
    makespan: int = 0
    cpu_busy_time: int = 0
    cpu_utilization: float = 0.0


@dataclass
class ScheduleResult:
    algorithm: str
    quantum: Optional[int]
    processes: List[ProcessRecord] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)
    metrics: Optional[RunMetrics] = None
