"""Task scheduler core functionality."""

from .core import Scheduler
from .builder import TaskHandle
from .cron_parser import matches, parse_cron_expression, validate_cron, get_cron_description
from .overlap import OverlapGuard
from .exceptions import (
    SchedulerError,
    InvalidExpression,
    NoTaskToModify,
    GuardStorageUnwritable,
    InvalidTimezone,
    CommandFailed
)

__all__ = [
    "Scheduler",
    "TaskHandle",
    "OverlapGuard",
    "matches",
    "parse_cron_expression",
    "validate_cron",
    "get_cron_description",
    "SchedulerError",
    "InvalidExpression",
    "NoTaskToModify",
    "GuardStorageUnwritable",
    "InvalidTimezone",
    "CommandFailed"
]
