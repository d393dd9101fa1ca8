"""Interfaces to the collaborators that scheduled actions call into."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """Result of a dispatched console command."""
    command: str
    exit_code: int
    started_at: datetime
    finished_at: datetime
    duration: float  # seconds
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "command": self.command,
            "exit_code": self.exit_code,
            "success": self.success,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "duration": self.duration,
            "stdout": self.stdout,
            "stderr": self.stderr
        }


class CommandDispatcher(ABC):
    """Runs a named console command on behalf of a scheduled task."""

    @abstractmethod
    def call(self, command: str, args: Optional[List[str]] = None) -> Any:
        """Run the command, raising if it fails."""
        pass


class JobQueue(ABC):
    """Accepts jobs pushed by scheduled tasks."""

    @abstractmethod
    def add(self, job: str, data: Any = None, queue: str = "default", delay: int = 0) -> Any:
        """Enqueue ``job`` with its payload on the named queue."""
        pass
