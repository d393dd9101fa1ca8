"""Data models for CronGuard."""

from .task import Task, TaskConditions, TaskState, DEFAULT_EXPRESSION

__all__ = [
    "Task",
    "TaskConditions",
    "TaskState",
    "DEFAULT_EXPRESSION"
]
