"""
CPU scheduling simulator.

Event-driven simulation of classical CPU scheduling disciplines over a batch
of processes known in advance, plus a small command-line front end.
"""

from .algorithms import (
    ALGORITHMS,
    FCFSPolicy,
    OrderedPolicy,
    PreemptivePriorityPolicy,
    PriorityPolicy,
    RoundRobinPolicy,
    SchedulingPolicy,
    SJFPolicy,
    SRTFPolicy,
    make_policy,
    run_algorithm,
)
from .metrics import compute_run_metrics
from .models import ProcessRecord, RunMetrics, ScheduleResult, ScheduledSlice

__all__ = [
    "ALGORITHMS",
    "FCFSPolicy",
    "OrderedPolicy",
    "PreemptivePriorityPolicy",
    "PriorityPolicy",
    "ProcessRecord",
    "RoundRobinPolicy",
    "RunMetrics",
    "ScheduleResult",
    "ScheduledSlice",
    "SchedulingPolicy",
    "SJFPolicy",
    "SRTFPolicy",
    "compute_run_metrics",
    "make_policy",
    "run_algorithm",
]
