from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .errors import EmptyWorkload, NotYetRun
from .models import ProcessRecord, RunMetrics, ScheduleResult, ScheduledSlice


def compute_run_metrics(
    records: Sequence[ProcessRecord],
    timeline: Optional[Sequence[ScheduledSlice]] = None,
) -> RunMetrics:
    """
    Reduce a finalized batch into averages, throughput and CPU utilization.

    Throughput is measured from time 0 to the last completion. Without a
    timeline the CPU is assumed busy for the sum of all bursts.
    """
    if not records:
        raise EmptyWorkload("Cannot compute metrics over an empty batch")

    unfinished = [p.pid for p in records if not p.is_finished]
    if unfinished:
        raise NotYetRun(f"Processes {unfinished} have not been scheduled yet")

    n = len(records)
    makespan = max(p.completion_time for p in records)
    if timeline is None:
        cpu_busy_time = sum(p.burst_time for p in records)
    else:
        cpu_busy_time = sum(slice_.length for slice_ in timeline)

    return RunMetrics(
        average_waiting_time=sum(p.waiting_time for p in records) / n,
        average_turnaround_time=sum(p.turnaround_time for p in records) / n,
        average_response_time=sum(p.response_time for p in records) / n,
        throughput=n / makespan,
        makespan=makespan,
        cpu_busy_time=cpu_busy_time,
        cpu_utilization=cpu_busy_time / makespan,
    )


def summarize_results(results: Iterable[ScheduleResult]) -> List[dict]:
    """
    Return one row of key metrics per result for quick comparison.
    """
    rows = []
    for result in results:
        m = result.metrics
        if m is None:
            m = compute_run_metrics(result.processes, result.timeline)
        rows.append(
            {
                "algorithm": result.algorithm,
                "quantum": result.quantum,
                "avg_waiting": m.average_waiting_time,
                "avg_turnaround": m.average_turnaround_time,
                "avg_response": m.average_response_time,
                "throughput": m.throughput,
            }
        )
    return rows
