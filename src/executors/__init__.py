"""Collaborators invoked by scheduled task actions."""

from .base import CommandDispatcher, JobQueue, ExecutionResult
from .shell_dispatcher import ShellDispatcher

__all__ = [
    "CommandDispatcher",
    "JobQueue",
    "ExecutionResult",
    "ShellDispatcher"
]
