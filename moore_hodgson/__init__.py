"""
Moore-Hodgson Scheduler Package

Single machine scheduling that finds the largest set of jobs which can
all be finished by their due times.
"""

__version__ = '0.1.0'

from .types import (
    Job,
    Selection,
    SchedulingPolicy,
    ScheduleRequest,
    ScheduleResponse,
    validate_job
)

from .algorithm import (
    schedule,
    sort_jobs,
    max_on_time,
    completion_times,
    is_on_time_schedulable,
    calculate_schedule_metrics
)

from .server import create_app, run_server

__all__ = [
    'Job',
    'Selection',
    'SchedulingPolicy',
    'ScheduleRequest',
    'ScheduleResponse',
    'validate_job',
    'schedule',
    'sort_jobs',
    'max_on_time',
    'completion_times',
    'is_on_time_schedulable',
    'calculate_schedule_metrics',
    'create_app',
    'run_server',
]
