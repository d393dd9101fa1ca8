"""Evaluation of the non-cron conditions attached to a task."""

from datetime import datetime, time
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging

from config import Settings, settings as default_settings
from models import Task
from .exceptions import InvalidTimezone

logger = logging.getLogger(__name__)


def get_zone(name: str) -> ZoneInfo:
    """Look up a timezone by its IANA name."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidTimezone(name) from e


def _parse_time(value: str) -> Optional[time]:
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except (ValueError, AttributeError):
        return None


def is_between(now: str, start: str, end: str) -> bool:
    """Check if an ``HH:MM`` time falls inside an inclusive window.

    A window whose start is later than its end wraps past midnight, so
    ("23:00", "01:00") contains "00:30". Unparseable times never match.
    """
    current = _parse_time(now)
    first = _parse_time(start)
    last = _parse_time(end)
    if current is None or first is None or last is None:
        return False
    if first <= last:
        return first <= current <= last
    return current >= first or current <= last


class ConditionEvaluator:
    """Decides whether a task's gating conditions allow it to run now."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings

    def localize(self, task: Task, now: datetime) -> datetime:
        """Rebuild ``now`` in the task's timezone.

        Falls back to the configured scheduler timezone, then to the
        process default.
        """
        name = task.conditions.timezone or self.settings.scheduler_timezone
        if name:
            return now.astimezone(get_zone(name))
        if now.tzinfo is None:
            return now
        return now.astimezone()

    def should_run(self, task: Task, now: datetime) -> bool:
        conditions = task.conditions

        if conditions.environments:
            if self.settings.environment not in conditions.environments:
                logger.debug(f"Skipping {task.label}: environment "
                             f"'{self.settings.environment}' not in {conditions.environments}")
                return False

        local = self.localize(task, now)
        clock = local.strftime("%H:%M")

        if conditions.between:
            start, end = conditions.between
            if not is_between(clock, start, end):
                logger.debug(f"Skipping {task.label}: {clock} outside {start}-{end}")
                return False

        if conditions.unless_between:
            start, end = conditions.unless_between
            if is_between(clock, start, end):
                logger.debug(f"Skipping {task.label}: {clock} inside {start}-{end}")
                return False

        for predicate in conditions.when:
            if not predicate(task):
                logger.debug(f"Skipping {task.label}: when() condition returned false")
                return False

        return True
