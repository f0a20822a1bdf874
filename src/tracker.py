"""Task list logic: id management, mutations, filtering and rendering.

The list keeps insertion order. Updates never move a task; sorting by
priority is a view produced at render time only.
"""
from typing import Iterable, List, Optional, Tuple
import re, unicodedata
from models import STATUSES, Priority, Task, now_timestamp
from theme import color, HEADER_COLOR, PRIORITY_COLOR, STATUS_COLOR

DISPLAY_STYLES: Tuple[str, ...] = ("plain", "decorated")
LIST_FILTERS: Tuple[str, ...] = ("all",) + STATUSES
SORT_KEYS: Tuple[str, ...] = ("insertion", "priority")
DESCRIPTION_WIDTH = 20
RULE_WIDTH = 100
SEP = "  "
ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")

# column title -> width
COLUMNS: Tuple[Tuple[str, int], ...] = (
    ("ID", 4),
    ("Status", 12),
    ("Priority", 9),
    ("Description", DESCRIPTION_WIDTH),
    ("Created", 19),
    ("Updated", 19),
)


class TaskNotFound(LookupError):
    def __init__(self, task_id: int):
        super().__init__(f"Task with ID {task_id} not found")
        self.task_id = task_id


class EmptyDescription(ValueError):
    def __init__(self):
        super().__init__("Task description cannot be empty")


class TaskList:
    def __init__(self, tasks: Optional[Iterable[Task]] = None):
        self.tasks: List[Task] = list(tasks) if tasks else []

    # -------------------- id management --------------------
    def next_id(self) -> int:
        """Max existing id + 1; gaps left by deletions are not reused."""
        return max((t.id for t in self.tasks), default=0) + 1

    def get(self, task_id: int) -> Task:
        for task in self.tasks:
            if task.id == task_id:
                return task
        raise TaskNotFound(task_id)

    # -------------------- task operations --------------------
    def add(self, description: str, priority: Priority = Priority.MEDIUM,
            timestamp: Optional[str] = None) -> Task:
        if not description.strip():
            raise EmptyDescription()
        ts = timestamp or now_timestamp()
        task = Task(id=self.next_id(), description=description, status='todo',
                    priority=priority, created_at=ts, updated_at=ts)
        self.tasks.append(task)
        return task

    def update(self, task_id: int, description: str, timestamp: Optional[str] = None) -> Task:
        if not description.strip():
            raise EmptyDescription()
        task = self.get(task_id)
        task.description = description
        task.touch(timestamp)
        return task

    def delete(self, task_id: int) -> Task:
        task = self.get(task_id)
        self.tasks.remove(task)
        return task

    def mark(self, task_id: int, status: str, timestamp: Optional[str] = None) -> Task:
        if status not in STATUSES:
            raise ValueError(f"Invalid status: {status}")
        task = self.get(task_id)
        task.status = status
        task.touch(timestamp)
        return task

    def set_priority(self, task_id: int, priority: Priority, timestamp: Optional[str] = None) -> Task:
        task = self.get(task_id)
        task.priority = priority
        task.touch(timestamp)
        return task

    # -------------------- queries --------------------
    def view(self, status_filter: str = "all", sort: str = "insertion") -> List[Task]:
        if status_filter not in LIST_FILTERS:
            raise ValueError(f"Invalid filter: {status_filter}")
        if sort not in SORT_KEYS:
            raise ValueError(f"Invalid sort key: {sort}")
        tasks = [t for t in self.tasks if status_filter == "all" or t.status == status_filter]
        if sort == "priority":
            # stable: equal priorities keep insertion order
            tasks.sort(key=lambda t: -t.priority.weight)
        return tasks

    # -------------------- display --------------------
    def render(self, status_filter: str = "all", sort: str = "insertion",
               style: str = "plain") -> List[str]:
        """Return the listing as lines; style is "plain" or "decorated"."""
        if style not in DISPLAY_STYLES:
            raise ValueError(f"Invalid display style: {style}")
        tasks = self.view(status_filter, sort)
        suffix = "" if status_filter == "all" else f" with status: {status_filter}"
        if not tasks:
            return [f"No tasks found{suffix}"]
        title = "Tasks" if status_filter == "all" else f"Tasks ({status_filter})"
        lines = [f"{title}:"]
        header = SEP.join(self._pad(name, width) for name, width in COLUMNS)
        lines.append(color(header.rstrip(), HEADER_COLOR) if style == "decorated" else header.rstrip())
        lines.append("─" * RULE_WIDTH)
        for task in tasks:
            cells = self._row(task, style)
            lines.append(SEP.join(self._pad(cell, width) for cell, (_, width) in zip(cells, COLUMNS)).rstrip())
        return lines

    def _row(self, task: Task, style: str) -> List[str]:
        status = task.status
        if style == "decorated":
            priority = color(f"{task.priority.emoji} {task.priority.label}",
                             PRIORITY_COLOR[task.priority.value])
            status = color(status, STATUS_COLOR.get(status, ""))
        else:
            priority = task.priority.label
        return [str(task.id), status, priority, truncate(task.description, DESCRIPTION_WIDTH),
                task.created_at, task.updated_at]

    @staticmethod
    def _pad(text: str, width: int) -> str:
        pad = width - visible_width(text)
        return text + " " * pad if pad > 0 else text

    def __len__(self) -> int:
        return len(self.tasks)

    def __str__(self) -> str:
        counts = ", ".join(f"{s}: {sum(1 for t in self.tasks if t.status == s)}" for s in STATUSES)
        return f"{len(self.tasks)} tasks ({counts})"


def truncate(text: str, max_length: int) -> str:
    """Single-line form of text, cut to max_length with a trailing '...'."""
    text = " ".join(text.split())
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."


def visible_width(s: str) -> int:
    """Terminal columns used by s: ANSI codes are free, wide glyphs take two."""
    plain = ANSI_RE.sub("", s)
    return sum(2 if unicodedata.east_asian_width(c) in ("W", "F") else 1 for c in plain)
