"""Fluent helpers that compile schedule intents into cron expressions."""

import re
from typing import Callable, Iterable, Tuple, Union

from models import Task
from .conditions import get_zone
from .cron_parser import split_expression

_LEADING_DIGITS = re.compile(r"\s*(\d+)")


def _leading_int(text: str) -> int:
    m = _LEADING_DIGITS.match(text)
    return int(m.group(1)) if m else 0


def parse_time(value: str) -> Tuple[int, int]:
    """Split an ``HH:MM`` string into (hour, minute).

    Each part is read up to its first non-digit, so a missing or garbled
    part counts as 0 ("8" and "08:xx" both give (8, 0)).
    """
    hour, _, minute = value.partition(":")
    return _leading_int(hour), _leading_int(minute)


def replace_week_field(expression: str, week_field: str) -> str:
    """Replace the day-of-week field, the last field of 5 and 6 field expressions."""
    parts = split_expression(expression)
    parts[-1] = week_field
    return " ".join(parts)


class TaskHandle:
    """Modifies the schedule and conditions of one registered task.

    Every method returns the handle itself so calls can be chained:

        scheduler.schedule(backup).daily_at("02:30").weekdays().without_overlapping()
    """

    def __init__(self, task: Task):
        self.task = task

    def __repr__(self):
        return f"TaskHandle({self.task.label!r}, {self.task.expression!r})"

    def cron(self, expression: str) -> "TaskHandle":
        self.task.expression = expression
        return self

    # Seconds

    def every_seconds(self, seconds: int) -> "TaskHandle":
        return self.cron(f"*/{seconds} * * * * *")

    def every_second(self) -> "TaskHandle":
        return self.cron("* * * * * *")

    def every_two_seconds(self) -> "TaskHandle":
        return self.every_seconds(2)

    def every_five_seconds(self) -> "TaskHandle":
        return self.every_seconds(5)

    def every_ten_seconds(self) -> "TaskHandle":
        return self.every_seconds(10)

    def every_fifteen_seconds(self) -> "TaskHandle":
        return self.every_seconds(15)

    def every_twenty_seconds(self) -> "TaskHandle":
        return self.every_seconds(20)

    def every_thirty_seconds(self) -> "TaskHandle":
        return self.every_seconds(30)

    # Minutes

    def every_minutes(self, minutes: int) -> "TaskHandle":
        return self.cron(f"*/{minutes} * * * *")

    def every_minute(self) -> "TaskHandle":
        return self.cron("* * * * *")

    def every_two_minutes(self) -> "TaskHandle":
        return self.every_minutes(2)

    def every_three_minutes(self) -> "TaskHandle":
        return self.every_minutes(3)

    def every_four_minutes(self) -> "TaskHandle":
        return self.every_minutes(4)

    def every_five_minutes(self) -> "TaskHandle":
        return self.every_minutes(5)

    def every_ten_minutes(self) -> "TaskHandle":
        return self.every_minutes(10)

    def every_fifteen_minutes(self) -> "TaskHandle":
        return self.every_minutes(15)

    def every_thirty_minutes(self) -> "TaskHandle":
        return self.every_minutes(30)

    # Hours

    def hourly(self) -> "TaskHandle":
        return self.cron("0 * * * *")

    def hourly_at(self, minute: int) -> "TaskHandle":
        return self.cron(f"{minute} * * * *")

    def every_hours(self, hours: int, minute: int = 0) -> "TaskHandle":
        return self.cron(f"{minute} */{hours} * * *")

    def every_odd_hour(self, minute: int = 0) -> "TaskHandle":
        return self.cron(f"{minute} 1-23/2 * * *")

    def every_two_hours(self, minute: int = 0) -> "TaskHandle":
        return self.every_hours(2, minute)

    def every_three_hours(self, minute: int = 0) -> "TaskHandle":
        return self.every_hours(3, minute)

    def every_four_hours(self, minute: int = 0) -> "TaskHandle":
        return self.every_hours(4, minute)

    def every_six_hours(self, minute: int = 0) -> "TaskHandle":
        return self.every_hours(6, minute)

    # Days

    def daily(self) -> "TaskHandle":
        return self.cron("0 0 * * *")

    def daily_at(self, time: str) -> "TaskHandle":
        hour, minute = parse_time(time)
        return self.cron(f"{minute} {hour} * * *")

    def twice_daily(self, first_hour: int, second_hour: int) -> "TaskHandle":
        return self.twice_daily_at(first_hour, second_hour, 0)

    def twice_daily_at(self, first_hour: int, second_hour: int, minute: int) -> "TaskHandle":
        return self.cron(f"{minute} {first_hour},{second_hour} * * *")

    # Weeks

    def weekly(self) -> "TaskHandle":
        return self.cron("0 0 * * 0")

    def weekly_on(self, day_of_week: int, time: str) -> "TaskHandle":
        hour, minute = parse_time(time)
        return self.cron(f"{minute} {hour} * * {day_of_week}")

    # Months

    def monthly(self) -> "TaskHandle":
        return self.cron("0 0 1 * *")

    def monthly_on(self, day: int, time: str) -> "TaskHandle":
        hour, minute = parse_time(time)
        return self.cron(f"{minute} {hour} {day} * *")

    def twice_monthly(self, first_day: int, second_day: int, time: str) -> "TaskHandle":
        hour, minute = parse_time(time)
        return self.cron(f"{minute} {hour} {first_day},{second_day} * *")

    def last_day_of_month(self, time: str) -> "TaskHandle":
        hour, minute = parse_time(time)
        return self.cron(f"{minute} {hour} L * *")

    def quarterly(self) -> "TaskHandle":
        return self.cron("0 0 1 */3 *")

    def quarterly_on(self, day: int, time: str) -> "TaskHandle":
        hour, minute = parse_time(time)
        return self.cron(f"{minute} {hour} {day} */3 *")

    def yearly(self) -> "TaskHandle":
        return self.cron("0 0 1 1 *")

    def yearly_on(self, month: int, day: int, time: str) -> "TaskHandle":
        hour, minute = parse_time(time)
        return self.cron(f"{minute} {hour} {day} {month} *")

    # Day-of-week filters, applied on top of the current expression

    def days(self, days: Union[str, int, Iterable[int]]) -> "TaskHandle":
        if isinstance(days, (str, int)):
            week_field = str(days)
        else:
            week_field = ",".join(str(day) for day in days)
        return self.cron(replace_week_field(self.task.expression, week_field))

    def weekdays(self) -> "TaskHandle":
        return self.days("1-5")

    def weekends(self) -> "TaskHandle":
        return self.days("0,6")

    def sundays(self) -> "TaskHandle":
        return self.days(0)

    def mondays(self) -> "TaskHandle":
        return self.days(1)

    def tuesdays(self) -> "TaskHandle":
        return self.days(2)

    def wednesdays(self) -> "TaskHandle":
        return self.days(3)

    def thursdays(self) -> "TaskHandle":
        return self.days(4)

    def fridays(self) -> "TaskHandle":
        return self.days(5)

    def saturdays(self) -> "TaskHandle":
        return self.days(6)

    # Conditions

    def timezone(self, tz: str) -> "TaskHandle":
        get_zone(tz)
        self.task.conditions.timezone = tz
        return self

    def when(self, predicate: Callable[[Task], bool]) -> "TaskHandle":
        self.task.conditions.when.append(predicate)
        return self

    def without_overlapping(self) -> "TaskHandle":
        self.task.conditions.without_overlapping = True
        return self

    def between(self, start_time: str, end_time: str) -> "TaskHandle":
        self.task.conditions.between = (start_time, end_time)
        return self

    def unless_between(self, start_time: str, end_time: str) -> "TaskHandle":
        self.task.conditions.unless_between = (start_time, end_time)
        return self

    def environments(self, *names: Union[str, Iterable[str]]) -> "TaskHandle":
        envs = []
        for name in names:
            if isinstance(name, str):
                envs.append(name)
            else:
                envs.extend(name)
        self.task.conditions.environments = envs
        return self

    # Labels

    def name(self, name: str) -> "TaskHandle":
        self.task.name = name
        return self

    def description(self, text: str) -> "TaskHandle":
        self.task.description = text
        return self
