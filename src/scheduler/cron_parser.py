"""Cron expression matching, validation and description."""

import calendar
import re
from datetime import datetime
from typing import List, Optional, Tuple
import logging

from croniter import croniter

from .exceptions import InvalidExpression

logger = logging.getLogger(__name__)

# (name, minimum, maximum) for each field of a 6-field expression
FIELDS: List[Tuple[str, int, int]] = [
    ("second", 0, 59),
    ("minute", 0, 59),
    ("hour", 0, 23),
    ("day", 1, 31),
    ("month", 1, 12),
    ("weekday", 0, 6),
]

_STEP = re.compile(r"^\*/(\d+)$")
_RANGE_STEP = re.compile(r"^(\d+)-(\d+)/(\d+)$")
_RANGE = re.compile(r"^(\d+)-(\d+)$")
_NUMBER = re.compile(r"^\d+$")


def split_expression(expression: str) -> List[str]:
    """Split an expression into its fields, checking there are 5 or 6 of them."""
    parts = expression.split()
    if len(parts) not in (5, 6):
        raise InvalidExpression(expression)
    return parts


def _field_values(now: datetime) -> List[int]:
    # isoweekday() is 1 (Monday) to 7 (Sunday); cron counts Sunday as 0
    return [now.second, now.minute, now.hour, now.day, now.month, now.isoweekday() % 7]


def match_field(expr: str, value: int, min_range: int, max_range: int,
                now: Optional[datetime] = None) -> bool:
    """Match a single cron field against a value.

    Args:
        expr: Field text, e.g. "*", "L", "*/5", "10-20/5", "1,15"
        value: Current value of the field
        min_range: Lowest valid value for the field
        max_range: Highest valid value for the field
        now: Current datetime, needed to resolve "L"

    Returns:
        True if the value satisfies the field
    """
    if value < min_range or value > max_range:
        return False

    if expr == "*":
        return True

    # "L" only means something in the day-of-month field
    if expr == "L" and (min_range, max_range) == (1, 31):
        current = now or datetime.now()
        return value == calendar.monthrange(current.year, current.month)[1]

    for part in expr.split(","):
        part = part.strip()
        if not part:
            continue

        m = _STEP.match(part)
        if m:
            step = int(m.group(1))
            if step > 0 and value % step == 0:
                return True
            continue

        m = _RANGE_STEP.match(part)
        if m:
            start = max(int(m.group(1)), min_range)
            end = min(int(m.group(2)), max_range)
            step = int(m.group(3))
            if step > 0 and start <= value <= end and (value - start) % step == 0:
                return True
            continue

        m = _RANGE.match(part)
        if m:
            start = max(int(m.group(1)), min_range)
            end = min(int(m.group(2)), max_range)
            if start <= value <= end:
                return True
            continue

        if _NUMBER.match(part):
            number = int(part)
            if min_range <= number <= max_range and value == number:
                return True

    return False


def matches(expression: str, now: datetime) -> bool:
    """Check whether a cron expression matches a point in time.

    Five-field expressions have no seconds field and match any second.

    Raises:
        InvalidExpression: if the expression does not have 5 or 6 fields
    """
    parts = split_expression(expression)
    values = _field_values(now)
    fields = FIELDS if len(parts) == 6 else FIELDS[1:]
    if len(parts) == 5:
        values = values[1:]

    for part, value, (_, min_range, max_range) in zip(parts, values, fields):
        if not match_field(part, value, min_range, max_range, now):
            return False
    return True


def _valid_term(term: str, min_range: int, max_range: int) -> bool:
    m = _STEP.match(term)
    if m:
        return int(m.group(1)) > 0
    m = _RANGE_STEP.match(term)
    if m:
        return int(m.group(3)) > 0 and int(m.group(1)) <= int(m.group(2))
    m = _RANGE.match(term)
    if m:
        return int(m.group(1)) <= int(m.group(2))
    if _NUMBER.match(term):
        return min_range <= int(term) <= max_range
    return False


def validate_cron(expression: str) -> bool:
    """Validate a cron expression.

    Args:
        expression: Cron expression string (e.g., "0 */2 * * *" or "*/5 * * * * *")

    Returns:
        True if valid, False otherwise
    """
    try:
        parts = split_expression(expression)
    except InvalidExpression as e:
        logger.error(f"{e}")
        return False

    fields = FIELDS if len(parts) == 6 else FIELDS[1:]
    for part, (name, min_range, max_range) in zip(parts, fields):
        if part == "*" or (part == "L" and name == "day"):
            continue
        if not all(_valid_term(term, min_range, max_range) for term in part.split(",")):
            logger.error(f"Invalid {name} field '{part}' in cron expression '{expression}'")
            return False
    return True


def parse_cron_expression(expression: str, base_time: Optional[datetime] = None) -> Optional[datetime]:
    """Parse cron expression and get next execution time.

    Args:
        expression: Cron expression string, 5 or 6 fields (seconds first)
        base_time: Base time for calculation (default: now)

    Returns:
        Next execution datetime or None if invalid
    """
    try:
        parts = split_expression(expression)
        base = base_time or datetime.now()
        cron = croniter(expression, base, day_or=False,
                        second_at_beginning=len(parts) == 6)
        return cron.get_next(datetime)
    except (ValueError, TypeError, KeyError) as e:
        logger.error(f"Failed to parse cron expression '{expression}': {e}")
        return None


def get_cron_description(expression: str) -> str:
    """Get human-readable description of cron expression.

    Args:
        expression: Cron expression string

    Returns:
        Human-readable description
    """
    # Common patterns
    patterns = {
        "* * * * * *": "Every second",
        "* * * * *": "Every minute",
        "*/5 * * * *": "Every 5 minutes",
        "*/15 * * * *": "Every 15 minutes",
        "*/30 * * * *": "Every 30 minutes",
        "0 * * * *": "Every hour",
        "0 0 * * *": "Daily at midnight",
        "0 0 * * 0": "Weekly on Sunday at midnight",
        "0 0 1 * *": "Monthly on the 1st at midnight",
        "0 0 1 */3 *": "Quarterly on the 1st at midnight",
        "0 0 1 1 *": "Yearly on January 1st at midnight",
    }

    if expression in patterns:
        return patterns[expression]

    parts = expression.split()
    if len(parts) not in (5, 6):
        return expression

    second = parts[0] if len(parts) == 6 else "*"
    minute, hour, day, month, weekday = parts[-5:]

    desc_parts = []

    if second != "*":
        if second.startswith("*/"):
            desc_parts.append(f"every {second[2:]} seconds")
        else:
            desc_parts.append(f"at second {second}")

    if minute != "*":
        if minute.startswith("*/"):
            desc_parts.append(f"every {minute[2:]} minutes")
        else:
            desc_parts.append(f"at minute {minute}")

    if hour != "*":
        if hour.startswith("*/"):
            desc_parts.append(f"every {hour[2:]} hours")
        else:
            desc_parts.append(f"at hour {hour}")

    if day == "L":
        desc_parts.append("on the last day of the month")
    elif day != "*":
        desc_parts.append(f"on day {day}")

    if month != "*":
        months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
                  "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
        if month.isdigit() and 1 <= int(month) <= 12:
            desc_parts.append(f"in {months[int(month) - 1]}")
        else:
            desc_parts.append(f"in month {month}")

    if weekday != "*":
        days = ["Sunday", "Monday", "Tuesday", "Wednesday",
                "Thursday", "Friday", "Saturday"]
        if weekday == "1-5":
            desc_parts.append("on weekdays")
        elif weekday == "0,6":
            desc_parts.append("on weekends")
        elif weekday.isdigit() and 0 <= int(weekday) <= 6:
            desc_parts.append(f"on {days[int(weekday)]}")
        else:
            desc_parts.append(f"on weekday {weekday}")

    if desc_parts:
        return "Runs " + ", ".join(desc_parts)
    return "Every second" if len(parts) == 6 else "Every minute"
