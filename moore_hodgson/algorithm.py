"""
Core scheduling algorithm.

This module implements the Moore-Hodgson algorithm for a single machine:
out of a set of jobs with due times and durations, find the largest subset
that can be finished without any job being late.

The algorithm is deterministic: given the same inputs, it will always
produce the same outputs.
"""

import heapq
import logging
from typing import List, MutableSequence, Optional, Sequence, Tuple

from .types import Job, Selection, SchedulingPolicy, validate_job


logger = logging.getLogger(__name__)


def schedule(
    jobs: MutableSequence[Job],
    policy: Optional[SchedulingPolicy] = None
) -> int:
    """
    Reorder jobs in place so the on-time jobs come first.

    This is the main scheduling function. After it returns, the first
    ``count`` jobs, run back to back from time 0 in their new order, all
    finish by their due time, and no larger set of jobs could.

    Algorithm:
    1. Validate all jobs; nothing is mutated if one is invalid
    2. Set aside jobs with a NaN due time, they are always late
    3. Sort the rest by due time (stable, ties keep input order)
    4. Select a maximum on-time set according to the policy
    5. Write back: on-time jobs in due time order, then late jobs,
       most recently rejected first

    Args:
        jobs: Mutable sequence of (label, due, duration) tuples
        policy: Scheduling policy, defaults to ``Selection.EARLIEST``

    Returns:
        Number of jobs that finish on time

    Raises:
        ValueError: If a job is malformed or has a negative duration
    """
    if not jobs:
        return 0

    for job in jobs:
        validate_job(job)

    if policy is None:
        policy = SchedulingPolicy()

    # NaN is the only value not equal to itself
    unordered = [job for job in jobs if job[1] != job[1]]
    ordered = sort_jobs([job for job in jobs if job[1] == job[1]])

    if policy.selection == Selection.LONGEST_REMOVAL:
        on_time, late = _select_longest_removal(ordered)
    else:
        on_time, late = _select_earliest(ordered)

    rejected = unordered + late
    jobs[:] = on_time + rejected[::-1]

    logger.debug(
        "Scheduled %d jobs: %d on time, %d late",
        len(jobs), len(on_time), len(rejected)
    )
    return len(on_time)


def sort_jobs(jobs: Sequence[Job]) -> List[Job]:
    """
    Sort jobs by due time (Earliest Due Date order).

    The sort is stable, so jobs sharing a due time keep their relative
    order.

    Args:
        jobs: Jobs to sort

    Returns:
        New sorted list of jobs
    """
    return sorted(jobs, key=lambda job: job[1])


def max_on_time(sorted_jobs: Sequence[Job], start=0) -> int:
    """
    Size of the largest on-time subset of jobs sorted by due time.

    Args:
        sorted_jobs: Jobs in Earliest Due Date order
        start: Time at which the machine becomes available

    Returns:
        Maximum number of jobs that can finish by their due time
    """
    return len(sorted_jobs) - len(_longest_removal(sorted_jobs, start))


def _longest_removal(
    sorted_jobs: Sequence[Job],
    start=0,
    first: int = 0,
    limit: Optional[int] = None
) -> List[int]:
    """
    Moore-Hodgson pass: positions of the removed jobs, in removal order.

    Whenever the running completion time passes the due time of the job
    just added, the longest job scanned so far is dropped. Among equally
    long jobs the one latest in due time order goes first.

    Only jobs from position ``first`` on are scanned. With ``limit`` set,
    the pass stops as soon as more than ``limit`` jobs were removed.
    """
    completion = start
    scanned: List[Tuple] = []
    removed = []

    for position in range(first, len(sorted_jobs)):
        job = sorted_jobs[position]
        due, duration = job[1], job[2]
        completion = completion + duration
        heapq.heappush(scanned, (-duration, -position))

        while completion > due and scanned:
            neg_duration, neg_position = heapq.heappop(scanned)
            completion = completion + neg_duration
            removed.append(-neg_position)

        if limit is not None and len(removed) > limit:
            break

    return removed


def _select_longest_removal(ordered: List[Job]) -> Tuple[List[Job], List[Job]]:
    removed = _longest_removal(ordered)
    dropped = set(removed)
    on_time = [job for position, job in enumerate(ordered) if position not in dropped]
    late = [ordered[position] for position in removed]
    return on_time, late


def _select_earliest(ordered: List[Job]) -> Tuple[List[Job], List[Job]]:
    """
    Keep each job, in due time order, whenever a maximum on-time set
    containing it and the jobs kept so far still exists.

    The on-time set is the lexicographically first maximum set in due
    time order. Each candidate costs one Moore-Hodgson pass over the
    remaining jobs, cut short once too many of them are dropped, so the
    worst case is O(n^2 log n).
    """
    on_time = []
    late = []
    needed = max_on_time(ordered)
    completion = 0

    for position, job in enumerate(ordered):
        # every remaining job is needed, so all of them fit
        if needed == len(ordered) - position:
            on_time.extend(ordered[position:])
            break

        finish = completion + job[2]
        if (
            needed
            and finish <= job[1]
            and _suffix_fits(ordered, position + 1, finish, needed - 1)
        ):
            on_time.append(job)
            completion = finish
            needed -= 1
        else:
            late.append(job)

    return on_time, late


def _suffix_fits(ordered: List[Job], first: int, start, wanted: int) -> bool:
    """Whether ``wanted`` jobs from position ``first`` on fit after ``start``."""
    spare = len(ordered) - first - wanted
    if spare < 0:
        return False
    return len(_longest_removal(ordered, start, first, limit=spare)) <= spare


def completion_times(jobs: Sequence[Job], start=0) -> list:
    """
    Completion time of each job when run back to back in the given order.

    Args:
        jobs: Jobs in execution order
        start: Time at which the first job starts

    Returns:
        List of completion times, one per job
    """
    times = []
    completion = start
    for job in jobs:
        completion = completion + job[2]
        times.append(completion)
    return times


def is_on_time_schedulable(jobs: Sequence[Job]) -> bool:
    """
    Determine if every job can finish by its due time.

    Earliest Due Date order is optimal for a fixed set of jobs, so it is
    enough to check that order.

    Args:
        jobs: Jobs in any order

    Returns:
        True if all jobs can be on time
    """
    ordered = sort_jobs(jobs)
    return all(
        finish <= job[1]
        for job, finish in zip(ordered, completion_times(ordered))
    )


def calculate_schedule_metrics(
    jobs: Sequence[Job],
    on_time_count: int
) -> dict:
    """
    Calculate metrics about a schedule produced by ``schedule``.

    Args:
        jobs: Jobs in the order left by ``schedule``
        on_time_count: Value returned by ``schedule``

    Returns:
        Dictionary containing scheduling metrics
    """
    on_time = jobs[:on_time_count]
    late = jobs[on_time_count:]

    return {
        "jobs_total": len(jobs),
        "jobs_on_time": len(on_time),
        "jobs_late": len(late),
        "on_time_ratio": len(on_time) / len(jobs) if jobs else 0,
        "makespan": sum(job[2] for job in on_time),
        "late_processing_time": sum(job[2] for job in late),
    }
