import gc
import random
from collections import defaultdict

import pytest

from scheduler_sim.algorithms import (
    ALGORITHMS,
    FCFSPolicy,
    OrderedPolicy,
    SchedulingPolicy,
    SJFPolicy,
    make_policy,
)
from scheduler_sim.errors import (
    AlreadyRun,
    DuplicateId,
    EmptyWorkload,
    InvalidInput,
    NotYetRun,
    RecordAlreadyInUse,
)
from scheduler_sim.models import ProcessRecord
from scheduler_sim.workload_io import sample_workload


def _random_workload(seed, n=12):
    rng = random.Random(seed)
    return [
        ProcessRecord(
            pid=i + 1,
            arrival_time=rng.randint(0, 30),
            burst_time=rng.randint(1, 9),
            priority=rng.randint(0, 4),
        )
        for i in range(n)
    ]


def _workloads():
    yield sample_workload()
    for seed in range(5):
        yield _random_workload(seed)


@pytest.mark.parametrize("name", list(ALGORITHMS))
def test_finalized_records_satisfy_invariants(name):
    for workload in _workloads():
        policy = make_policy(name, quantum=3)
        policy.submit_all(workload)
        policy.run()
        res = policy.results()

        for p in res.processes:
            assert p.remaining_time == 0
            assert p.completion_time >= p.arrival_time + p.burst_time
            assert p.turnaround_time == p.completion_time - p.arrival_time
            assert p.waiting_time == p.turnaround_time - p.burst_time
            assert 0 <= p.response_time <= p.waiting_time


@pytest.mark.parametrize("name", list(ALGORITHMS))
def test_work_is_conserved_and_cpu_never_idles_with_ready_work(name):
    for workload in _workloads():
        policy = make_policy(name, quantum=2)
        policy.submit_all(workload)
        policy.run()
        res = policy.results()

        executed = defaultdict(int)
        for s in res.timeline:
            assert s.length > 0
            executed[s.pid] += s.length
        assert executed == {p.pid: p.burst_time for p in res.processes}

        ordered = sorted(res.timeline, key=lambda s: s.start_time)
        idle_from = 0
        for s in ordered:
            assert s.start_time >= idle_from
            if s.start_time > idle_from:
                waiting = [
                    p.pid
                    for p in res.processes
                    if p.arrival_time <= idle_from < p.completion_time
                ]
                assert waiting == []
            idle_from = s.end_time


@pytest.mark.parametrize("name", ["fcfs", "sjf", "priority"])
def test_non_preemptive_response_equals_waiting(name):
    for workload in _workloads():
        policy = make_policy(name)
        policy.submit_all(workload)
        policy.run()
        for p in policy.results().processes:
            assert p.response_time == p.waiting_time


def test_fcfs_completion_follows_arrival_order():
    for workload in _workloads():
        policy = FCFSPolicy()
        policy.submit_all(workload)
        policy.run()

        previous = 0
        for p in sorted(policy.results().processes, key=lambda p: p.arrival_time):
            assert p.completion_time == max(previous, p.arrival_time) + p.burst_time
            previous = p.completion_time


@pytest.mark.parametrize(
    "record",
    [
        ProcessRecord(1, arrival_time=-1, burst_time=3),
        ProcessRecord(1, arrival_time=0, burst_time=0),
        ProcessRecord(1, arrival_time=0, burst_time=-2),
        ProcessRecord("P1", arrival_time=0, burst_time=2),
        ProcessRecord(1, arrival_time=0, burst_time=2, priority=None),
    ],
)
def test_submit_rejects_invalid_input(record):
    with pytest.raises(InvalidInput):
        FCFSPolicy().submit(record)


def test_submit_rejects_duplicate_id():
    policy = FCFSPolicy()
    policy.submit(ProcessRecord(1, arrival_time=0, burst_time=3))
    with pytest.raises(DuplicateId):
        policy.submit(ProcessRecord(1, arrival_time=2, burst_time=4))


def test_run_requires_processes():
    with pytest.raises(EmptyWorkload):
        SJFPolicy().run()


def test_results_before_run():
    policy = SJFPolicy()
    policy.submit(ProcessRecord(1, arrival_time=0, burst_time=3))
    with pytest.raises(NotYetRun):
        policy.results()


def test_policy_is_single_shot():
    policy = FCFSPolicy()
    policy.submit(ProcessRecord(1, arrival_time=0, burst_time=3))
    policy.run()
    with pytest.raises(AlreadyRun):
        policy.run()
    with pytest.raises(AlreadyRun):
        policy.submit(ProcessRecord(2, arrival_time=0, burst_time=3))


def test_record_owned_by_unfinished_run_is_rejected():
    record = ProcessRecord(1, arrival_time=0, burst_time=3)
    first = FCFSPolicy()
    first.submit(record)

    with pytest.raises(RecordAlreadyInUse):
        SJFPolicy().submit(record)

    first.run()
    assert record.owner is None

    # Finished records carry state; a fresh copy is required.
    with pytest.raises(InvalidInput):
        SJFPolicy().submit(record)

    second = SJFPolicy()
    second.submit(record.fresh_copy())
    second.run()
    assert second.results().processes[0].completion_time == 3


def test_response_time_unset_until_dispatch():
    record = ProcessRecord(1, arrival_time=0, burst_time=3)
    assert record.response_time is None
    assert record.completion_time is None
    assert record.remaining_time == 3


def test_make_policy_quantum_defaults():
    assert make_policy("rr").quantum == 2
    assert make_policy("RR", quantum=5).quantum == 5
    assert make_policy("fcfs", quantum=5).quantum is None


def test_policy_bases_are_abstract():
    with pytest.raises(TypeError):
        SchedulingPolicy()
    with pytest.raises(TypeError):
        OrderedPolicy()


def test_discarded_policy_releases_its_records():
    record = ProcessRecord(1, arrival_time=0, burst_time=3)
    abandoned = FCFSPolicy()
    abandoned.submit(record)
    assert record.owner is abandoned

    del abandoned
    gc.collect()
    assert record.owner is None

    policy = SJFPolicy()
    policy.submit(record)
    policy.run()
    assert policy.results().processes[0].completion_time == 3
