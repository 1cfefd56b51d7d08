"""
Data models for the Moore-Hodgson scheduler.

This module defines the core data structures used in scheduling:
- Jobs to be scheduled on a single machine
- The policy choosing among equally large on-time sets
- Requests and responses exchanged with the HTTP API
"""

from dataclasses import dataclass, field
from typing import Any, List, NamedTuple, Sequence
from enum import Enum


class Job(NamedTuple):
    """
    A job to be scheduled.

    Any plain ``(label, due, duration)`` tuple is accepted wherever a Job
    is expected; this type only names the fields.

    Attributes:
        label: Opaque identifier, carried along but never interpreted
        due: Time by which the job has to be finished
        duration: Processing time of the job, never negative
    """
    label: Any
    due: Any
    duration: Any


class Selection(Enum):
    """Which maximum on-time set to report when several exist."""
    EARLIEST = "earliest"
    LONGEST_REMOVAL = "longest_removal"


@dataclass
class SchedulingPolicy:
    """
    Policy configuration for the scheduler.

    Attributes:
        selection: How to pick among on-time sets of maximum size
    """
    selection: Selection = Selection.EARLIEST


@dataclass
class ScheduleRequest:
    """
    Request to schedule a set of jobs.

    Attributes:
        jobs: Jobs in arbitrary order
        policy: Policy to schedule them with
    """
    jobs: List[Job]
    policy: SchedulingPolicy = field(default_factory=SchedulingPolicy)


@dataclass
class ScheduleResponse:
    """
    Outcome of a scheduling request.

    Attributes:
        on_time: Jobs finishing on time, in execution order
        late: Jobs that cannot be finished on time
    """
    on_time: List[Job]
    late: List[Job]

    @property
    def on_time_count(self) -> int:
        return len(self.on_time)


def validate_job(job: Sequence) -> None:
    """
    Check that a job is a ``(label, due, duration)`` triple with a
    non-negative duration.

    Raises:
        ValueError: If the job is malformed or its duration is negative or NaN
    """
    if len(job) != 3:
        raise ValueError(f"Job must be a (label, due, duration) triple, got {job!r}")
    duration = job[2]
    # also false for NaN
    if not duration >= 0:
        raise ValueError(f"Duration cannot be negative, got {duration!r} for job {job[0]!r}")
