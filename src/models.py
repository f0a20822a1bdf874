"""Data models for the task tracker.

Exposes the Task dataclass and the Priority enumeration. Status keys are
"todo", "in-progress" and "done"; they are stored verbatim and never
translated, which keeps the file format stable across versions.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Tuple

STATUSES: Tuple[str, ...] = ("todo", "in-progress", "done")
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class Priority(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Priority":
        """Case-insensitive lookup; None or unknown text maps to MEDIUM."""
        if value is None:
            return cls.MEDIUM
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.MEDIUM

    @property
    def weight(self) -> int:
        return PRIORITY_TABLE[self][0]

    @property
    def label(self) -> str:
        return PRIORITY_TABLE[self][1]

    @property
    def emoji(self) -> str:
        return PRIORITY_TABLE[self][2]


# priority -> (sort weight, short label, emoji)
PRIORITY_TABLE: Dict[Priority, Tuple[int, str, str]] = {
    Priority.HIGH: (3, "HIGH", "\U0001F534"),
    Priority.MEDIUM: (2, "MED", "\U0001F7E1"),
    Priority.LOW: (1, "LOW", "\U0001F7E2"),
}


def now_timestamp() -> str:
    """Current local time in the on-disk timestamp format."""
    return datetime.now().strftime(TIMESTAMP_FORMAT)


@dataclass
class Task:
    """A single tracked task.

    Fields:
        id: Positive integer, unique within the list.
        description: Free text; may contain quotes, backslashes, newlines.
        status: One of: "todo", "in-progress", "done".
        priority: Priority member, MEDIUM when the stored value is missing.
        created_at: Creation time, "yyyy-MM-dd HH:mm:ss".
        updated_at: Time of the most recent mutation, same format.
    """
    id: int
    description: str
    status: str = "todo"
    priority: Priority = Priority.MEDIUM
    created_at: str = ""
    updated_at: str = ""

    def touch(self, timestamp: Optional[str] = None) -> None:
        self.updated_at = timestamp or now_timestamp()
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return (f"Task(id={self.id}, description={self.description!r}, "
                f"status={self.status}, priority={self.priority.value})")
