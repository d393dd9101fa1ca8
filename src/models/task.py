"""Task model for scheduled work."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

DEFAULT_EXPRESSION = "* * * * *"

Window = Tuple[str, str]


class TaskState(str, Enum):
    PENDING = "pending"
    SKIPPED = "skipped"  # A gating condition failed
    RUNNING = "running"
    DONE = "done"
    ABORTED = "aborted"  # The action raised


@dataclass
class TaskConditions:
    """Gating conditions evaluated before a task's expression is matched."""
    environments: Optional[List[str]] = None
    timezone: Optional[str] = None
    between: Optional[Window] = None
    unless_between: Optional[Window] = None
    when: List[Callable[["Task"], bool]] = field(default_factory=list)
    without_overlapping: bool = False

    # Accepted spellings for each field when conditions come in as a mapping
    _ALIASES = {
        "env": "environments",
        "environments": "environments",
        "timezone": "timezone",
        "between": "between",
        "unlessBetween": "unless_between",
        "unless_between": "unless_between",
        "when": "when",
        "withoutOverlapping": "without_overlapping",
        "without_overlapping": "without_overlapping",
    }

    @classmethod
    def from_mapping(cls, conditions: Optional[Mapping[str, Any]]) -> "TaskConditions":
        if isinstance(conditions, cls):
            return replace(
                conditions,
                when=list(conditions.when),
                environments=list(conditions.environments) if conditions.environments else None
            )
        result = cls()
        for key, value in (conditions or {}).items():
            name = cls._ALIASES.get(key)
            if name is None:
                raise KeyError(f"Unknown task condition '{key}'")
            if name == "environments" and isinstance(value, str):
                value = [value]
            elif name == "environments" and value is not None:
                value = list(value)
            elif name == "when":
                value = list(value) if isinstance(value, (list, tuple)) else [value]
            elif name in ("between", "unless_between") and value is not None:
                value = tuple(value)
            setattr(result, name, value)
        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            "environments": self.environments,
            "timezone": self.timezone,
            "between": list(self.between) if self.between else None,
            "unless_between": list(self.unless_between) if self.unless_between else None,
            "when": len(self.when),
            "without_overlapping": self.without_overlapping,
        }


@dataclass
class Task:
    action: Callable[[], Any]
    expression: str = DEFAULT_EXPRESSION
    conditions: TaskConditions = field(default_factory=TaskConditions)
    index: int = -1  # Assigned by the scheduler on registration
    name: Optional[str] = None
    description: Optional[str] = None
    last_state: TaskState = TaskState.PENDING  # Outcome of the most recent pass

    @property
    def label(self) -> str:
        """Name used in logs and listings."""
        if self.name:
            return self.name
        return getattr(self.action, "__qualname__", None) or f"task #{self.index}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "name": self.label,
            "description": self.description,
            "expression": self.expression,
            "last_state": self.last_state.value,
            "conditions": self.conditions.to_dict(),
        }
