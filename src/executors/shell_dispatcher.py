"""Console command dispatcher backed by the host shell."""

import os
import shlex
import subprocess
from datetime import datetime
from typing import Dict, List, Optional
import logging

from config import settings
from scheduler.exceptions import CommandFailed
from .base import CommandDispatcher, ExecutionResult

logger = logging.getLogger(__name__)


class ShellDispatcher(CommandDispatcher):
    """Runs scheduled console commands as shell subprocesses."""

    def __init__(self, timeout: Optional[int] = None, working_dir: Optional[str] = None,
                 env: Optional[Dict[str, str]] = None):
        self.timeout = timeout or settings.command_timeout
        self.working_dir = working_dir
        self.env = env or {}

    def build_command(self, command: str, args: Optional[List[str]] = None) -> str:
        if not command:
            raise ValueError("Command is required")
        if args:
            return f"{command} {' '.join(shlex.quote(str(arg)) for arg in args)}"
        return command

    def call(self, command: str, args: Optional[List[str]] = None) -> ExecutionResult:
        """Run a command and wait for it.

        Raises:
            CommandFailed: on a non-zero exit code or when the timeout expires
        """
        full_command = self.build_command(command, args)
        env = os.environ.copy()
        env.update(self.env)

        logger.info(f"Executing command: {full_command}")
        if self.working_dir:
            logger.debug(f"Working directory: {self.working_dir}")

        started_at = datetime.now()
        try:
            process = subprocess.run(
                full_command,
                shell=True,
                capture_output=True,
                cwd=self.working_dir,
                env=env,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired as e:
            logger.error(f"Command timeout after {self.timeout} seconds: {full_command}")
            raise CommandFailed(full_command) from e

        finished_at = datetime.now()
        result = ExecutionResult(
            command=full_command,
            exit_code=process.returncode,
            started_at=started_at,
            finished_at=finished_at,
            duration=(finished_at - started_at).total_seconds(),
            stdout=process.stdout.decode("utf-8", errors="replace") if process.stdout else "",
            stderr=process.stderr.decode("utf-8", errors="replace") if process.stderr else ""
        )

        if not result.success:
            logger.warning(f"Command failed with exit code: {result.exit_code}")
            raise CommandFailed(full_command, result.exit_code, result.stderr)

        logger.info(f"Command completed successfully in {result.duration:.2f}s")
        return result
