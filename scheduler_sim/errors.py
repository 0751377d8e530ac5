"""
Exceptions raised by the scheduling engine.

Everything is detected synchronously, either when a process is submitted or
when a policy is constructed, so a run that starts always completes.
"""


class SchedulerError(Exception):
    """Base class for all scheduling errors."""


class InvalidInput(SchedulerError, ValueError):
    """Malformed process descriptor or invalid policy parameter."""


class DuplicateId(SchedulerError, ValueError):
    def __init__(self, pid: int) -> None:
        super().__init__(f"Process id {pid} was already submitted")
        self.pid = pid


class EmptyWorkload(SchedulerError):
    """A run or metrics computation was requested over zero processes."""


class NotYetRun(SchedulerError):
    """Results were requested before the simulation ran."""


class AlreadyRun(SchedulerError):
    """The policy already completed its single run."""


class RecordAlreadyInUse(SchedulerError):
    def __init__(self, pid: int, owner: str) -> None:
        super().__init__(f"Process {pid} is still owned by an unfinished {owner} run")
        self.pid = pid
        self.owner = owner
