"""File based guard against overlapping task runs."""

import hashlib
import os
import time
from pathlib import Path
from typing import Optional
import logging

from config import settings
from .exceptions import GuardStorageUnwritable

logger = logging.getLogger(__name__)

MARKER_PREFIX = "scheduler_task_"


class OverlapGuard:
    """Manages one lock marker per task index inside a shared directory.

    Markers are plain files, so separate scheduler processes on the same
    host see each other's locks. A marker left behind by a crashed process
    is never expired and must be removed by hand (see ``clear``).
    """

    def __init__(self, lock_dir: Optional[str] = None):
        self.lock_dir = Path(lock_dir or settings.lock_dir)

    def marker_path(self, index: int) -> Path:
        digest = hashlib.md5(f"{MARKER_PREFIX}{index}".encode("utf-8")).hexdigest()
        return self.lock_dir / f"{digest}.lock"

    def _ensure_writable(self):
        try:
            self.lock_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as e:
            raise GuardStorageUnwritable(str(self.lock_dir)) from e
        if not os.access(self.lock_dir, os.W_OK):
            raise GuardStorageUnwritable(str(self.lock_dir))

    def try_acquire(self, index: int) -> bool:
        """Create the marker for a task.

        Returns:
            False if the marker already exists, True if it was created
        """
        self._ensure_writable()
        path = self.marker_path(index)
        try:
            fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            logger.info(f"Task {index} is already running, lock held at {path}")
            return False
        except PermissionError as e:
            raise GuardStorageUnwritable(str(self.lock_dir)) from e

        try:
            with os.fdopen(fd, "w") as marker:
                marker.write(str(int(time.time())))
        except OSError:
            path.unlink(missing_ok=True)
            raise
        logger.debug(f"Acquired lock for task {index}: {path}")
        return True

    def release(self, index: int):
        """Remove the marker for a task if present."""
        path = self.marker_path(index)
        path.unlink(missing_ok=True)
        logger.debug(f"Released lock for task {index}")

    def is_held(self, index: int) -> bool:
        return self.marker_path(index).is_file()

    def clear(self) -> int:
        """Remove every marker in the lock directory.

        Returns:
            Number of markers removed
        """
        if not self.lock_dir.is_dir():
            return 0
        removed = 0
        for path in self.lock_dir.glob("*.lock"):
            path.unlink(missing_ok=True)
            removed += 1
        logger.info(f"Removed {removed} lock marker(s) from {self.lock_dir}")
        return removed
