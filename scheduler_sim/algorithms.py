from __future__ import annotations

import heapq
import logging
import weakref
from abc import ABC, abstractmethod
from collections import deque
from typing import Callable, Deque, Dict, Iterable, List, Optional, Set, Tuple, Type

from .errors import (
    AlreadyRun,
    DuplicateId,
    EmptyWorkload,
    InvalidInput,
    NotYetRun,
    RecordAlreadyInUse,
)
from .metrics import compute_run_metrics
from .models import ProcessRecord, ScheduleResult, ScheduledSlice

logger = logging.getLogger(__name__)

DEFAULT_QUANTUM = 2


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_record(record: ProcessRecord) -> None:
    """
    Reject malformed process descriptors before they reach a run.
    """
    if not _is_int(record.pid):
        raise InvalidInput(f"Process id must be an integer, got {record.pid!r}")
    if not _is_int(record.arrival_time) or record.arrival_time < 0:
        raise InvalidInput(f"Process {record.pid}: arrival time must be a non-negative integer")
    if not _is_int(record.burst_time) or record.burst_time <= 0:
        raise InvalidInput(f"Process {record.pid}: burst time must be a positive integer")
    if not _is_int(record.priority):
        raise InvalidInput(f"Process {record.pid}: priority must be an integer")


class _HeapReadySet:
    """
    Ready set ordered by ``key``. Entries are indices into the batch, and the
    index also settles any tie the key leaves open (submission order).
    """

    def __init__(self, records: List[ProcessRecord], key: Callable[[ProcessRecord], tuple]):
        self._records = records
        self._key = key
        self._heap: List[Tuple[tuple, int]] = []

    def push(self, index: int) -> None:
        heapq.heappush(self._heap, (self._key(self._records[index]), index))

    def pop(self) -> int:
        return heapq.heappop(self._heap)[1]

    def __len__(self) -> int:
        return len(self._heap)


class _FifoReadySet:
    def __init__(self) -> None:
        self._queue: Deque[int] = deque()

    def push(self, index: int) -> None:
        self._queue.append(index)

    def pop(self) -> int:
        return self._queue.popleft()

    def __len__(self) -> int:
        return len(self._queue)


class SchedulingPolicy(ABC):
    """
    Event-driven simulation of one scheduling discipline over one batch.

    A policy instance is single-shot: submit processes, call :meth:`run`
    once, then read :meth:`results`. Submitted records are mutated in place
    and belong to this policy until the run completes or the policy is
    discarded.

    Subclasses supply the ready set through :meth:`new_ready_set` and may
    change how long a dispatch lasts by overriding :meth:`time_slice`.
    """

    name: str = ""
    key: str = ""
    preemptive: bool = False

    def __init__(self) -> None:
        self._records: List[ProcessRecord] = []
        self._pids: Set[int] = set()
        self._timeline: List[ScheduledSlice] = []
        self._result: Optional[ScheduleResult] = None

    @property
    def quantum(self) -> Optional[int]:
        return None

    @property
    def has_run(self) -> bool:
        return self._result is not None

    def submit(self, record: ProcessRecord) -> None:
        if self.has_run:
            raise AlreadyRun(f"{self.name} already ran; create a new policy instance")

        validate_record(record)
        owner = record.owner
        if owner is not None and owner is not self:
            raise RecordAlreadyInUse(record.pid, owner.name)
        if record.pid in self._pids:
            raise DuplicateId(record.pid)
        if not record.is_pristine:
            raise InvalidInput(
                f"Process {record.pid} already carries simulation state; submit record.fresh_copy()"
            )

        record.owner_ref = weakref.ref(self)
        self._pids.add(record.pid)
        self._records.append(record)

    def submit_all(self, records: Iterable[ProcessRecord]) -> None:
        for record in records:
            self.submit(record)

    @abstractmethod
    def new_ready_set(self):
        """Empty ready set for one run; entries are indices into the batch."""

    def time_slice(self, record: ProcessRecord, clock: int, next_arrival: Optional[int]) -> int:
        """
        How long ``record`` runs once dispatched at ``clock``.

        Non-preemptive policies run to completion. Preemptive ones stop at the
        next pending arrival so the new process can be compared against the
        running one.
        """
        if self.preemptive and next_arrival is not None:
            return min(record.remaining_time, next_arrival - clock)
        return record.remaining_time

    def run(self) -> None:
        if self.has_run:
            raise AlreadyRun(f"{self.name} already ran; create a new policy instance")
        if not self._records:
            raise EmptyWorkload(f"{self.name}: no processes were submitted")

        records = self._records
        n = len(records)
        # Stable: equal arrivals keep submission order.
        arrivals = sorted(range(n), key=lambda i: records[i].arrival_time)
        ready = self.new_ready_set()

        clock = 0
        cursor = 0
        finished = 0

        def admit(cursor: int, clock: int) -> int:
            while cursor < n and records[arrivals[cursor]].arrival_time <= clock:
                ready.push(arrivals[cursor])
                cursor += 1
            return cursor

        while finished < n:
            cursor = admit(cursor, clock)

            if not ready:
                clock = records[arrivals[cursor]].arrival_time
                logger.debug("%s: CPU idle, jumping to t=%d", self.name, clock)
                continue

            index = ready.pop()
            record = records[index]
            if record.response_time is None:
                record.response_time = clock - record.arrival_time

            next_arrival = records[arrivals[cursor]].arrival_time if cursor < n else None
            run_time = self.time_slice(record, clock, next_arrival)
            logger.debug("%s: t=%d dispatch P%s for %d", self.name, clock, record.pid, run_time)

            self._append_slice(record.pid, clock, clock + run_time)
            clock += run_time
            record.remaining_time -= run_time

            # Arrivals during the slice queue up ahead of the preempted process.
            cursor = admit(cursor, clock)

            if record.remaining_time == 0:
                self._finalize(record, clock)
                finished += 1
            else:
                ready.push(index)

        for record in records:
            record.owner_ref = None

        self._result = ScheduleResult(
            algorithm=self.name,
            quantum=self.quantum,
            processes=list(records),
            timeline=list(self._timeline),
            metrics=compute_run_metrics(records, self._timeline),
        )
        logger.info("%s: scheduled %d processes, makespan %d", self.name, n, clock)

    def results(self) -> ScheduleResult:
        if self._result is None:
            raise NotYetRun(f"{self.name} has not been run yet")
        return self._result

    def _append_slice(self, pid: int, start: int, end: int) -> None:
        last = self._timeline[-1] if self._timeline else None
        if last is not None and last.pid == pid and last.end_time == start:
            last.end_time = end
        else:
            self._timeline.append(ScheduledSlice(pid=pid, start_time=start, end_time=end))

    def _finalize(self, record: ProcessRecord, clock: int) -> None:
        record.completion_time = clock
        record.turnaround_time = clock - record.arrival_time
        record.waiting_time = record.turnaround_time - record.burst_time
        logger.debug(
            "%s: P%s completed at t=%d (wait=%d, turnaround=%d)",
            self.name,
            record.pid,
            clock,
            record.waiting_time,
            record.turnaround_time,
        )


class OrderedPolicy(SchedulingPolicy):
    """
    Policy whose ready set is a heap ordered by :meth:`ready_key`.
    """

    @abstractmethod
    def ready_key(self, record: ProcessRecord) -> tuple:
        ...

    def new_ready_set(self):
        return _HeapReadySet(self._records, self.ready_key)


class FCFSPolicy(OrderedPolicy):
    """
    First-Come First-Serve (non-preemptive).
    """

    name = "FCFS"
    key = "fcfs"

    def ready_key(self, record: ProcessRecord) -> tuple:
        return (record.arrival_time,)


class SJFPolicy(OrderedPolicy):
    """
    Shortest Job First (non-preemptive).

    Among arrived processes, the smallest burst runs to completion; ties go to
    the earlier arrival, then the lower id.
    """

    name = "SJF (non-preemptive)"
    key = "sjf"

    def ready_key(self, record: ProcessRecord) -> tuple:
        return (record.burst_time, record.arrival_time, record.pid)


class SRTFPolicy(OrderedPolicy):
    """
    Shortest Remaining Time First (preemptive SJF).
    """

    name = "SRTF"
    key = "srtf"
    preemptive = True

    def ready_key(self, record: ProcessRecord) -> tuple:
        return (record.remaining_time, record.arrival_time, record.pid)


class RoundRobinPolicy(SchedulingPolicy):
    """
    Round Robin scheduling with a fixed time quantum.
    """

    name = "Round Robin"
    key = "rr"

    def __init__(self, quantum: int = DEFAULT_QUANTUM) -> None:
        if not _is_int(quantum) or quantum <= 0:
            raise InvalidInput(f"Round Robin requires a positive integer quantum, got {quantum!r}")
        super().__init__()
        self._quantum = quantum

    @property
    def quantum(self) -> int:
        return self._quantum

    def new_ready_set(self):
        return _FifoReadySet()

    def time_slice(self, record: ProcessRecord, clock: int, next_arrival: Optional[int]) -> int:
        return min(self._quantum, record.remaining_time)


class PriorityPolicy(OrderedPolicy):
    """
    Static Priority scheduling (non-preemptive).

    Higher numeric priority value runs first. Note this is the opposite of
    :class:`PreemptivePriorityPolicy`.
    """

    name = "Priority (non-preemptive)"
    key = "priority"

    def ready_key(self, record: ProcessRecord) -> tuple:
        return (-record.priority, record.arrival_time, record.pid)


class PreemptivePriorityPolicy(OrderedPolicy):
    """
    Preemptive Priority scheduling. Lower numeric priority value runs first.
    """

    name = "Preemptive Priority"
    key = "ppriority"
    preemptive = True

    def ready_key(self, record: ProcessRecord) -> tuple:
        return (record.priority, record.arrival_time, record.pid)


ALGORITHMS: Dict[str, Type[SchedulingPolicy]] = {
    policy.key: policy
    for policy in (
        FCFSPolicy,
        SJFPolicy,
        SRTFPolicy,
        RoundRobinPolicy,
        PriorityPolicy,
        PreemptivePriorityPolicy,
    )
}


def make_policy(name: str, quantum: Optional[int] = None) -> SchedulingPolicy:
    """
    Build a fresh policy by registry key. The quantum only applies to Round
    Robin and defaults to ``DEFAULT_QUANTUM``.
    """
    name = name.lower()
    if name not in ALGORITHMS:
        raise InvalidInput(f"Unknown algorithm '{name}' (choose from {', '.join(ALGORITHMS)})")

    cls = ALGORITHMS[name]
    if cls is RoundRobinPolicy:
        return RoundRobinPolicy(DEFAULT_QUANTUM if quantum is None else quantum)
    return cls()


def run_algorithm(
    name: str, processes: Iterable[ProcessRecord], quantum: Optional[int] = None
) -> ScheduleResult:
    """
    Run one policy over fresh copies of ``processes``; the inputs are left
    untouched so the same workload can feed several runs.
    """
    policy = make_policy(name, quantum=quantum)
    policy.submit_all(p.fresh_copy() for p in processes)
    policy.run()
    return policy.results()
