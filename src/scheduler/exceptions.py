"""Scheduler exception types."""


class SchedulerError(Exception):
    """Base class for scheduler errors."""


class InvalidExpression(SchedulerError, ValueError):
    """Raised when a cron expression does not have 5 or 6 fields."""

    def __init__(self, expression: str):
        self.expression = expression
        super().__init__(f'Invalid cron expression "{expression}"')


class NoTaskToModify(SchedulerError):
    """Raised when a modifier is used before any task was registered."""

    def __init__(self):
        super().__init__("No task was added to be modified")


class GuardStorageUnwritable(SchedulerError):
    """Raised when the overlap guard directory cannot be written to."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f'Directory "{path}" is not writable, please check its permissions')


class InvalidTimezone(SchedulerError, ValueError):
    """Raised when a task is given an unknown timezone name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Unknown timezone "{name}"')


class CommandFailed(SchedulerError):
    """Raised by the shell dispatcher when a command exits non-zero or times out."""

    def __init__(self, command: str, exit_code=None, stderr: str = ""):
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        if exit_code is None:
            message = f"Command timed out: {command}"
        else:
            message = f"Command failed with exit code {exit_code}: {command}"
        super().__init__(message)
