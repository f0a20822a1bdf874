"""Persistence for the task list.

Storage is a small port with two implementations: FileStorage reads and
rewrites a UTF-8 file, MemoryStorage keeps the document in memory for tests.
Both speak the codec's document text, so a MemoryStorage holds exactly what
a file would.

Each save is a direct overwrite. There is no lock around the
load-modify-save cycle; two invocations racing on the same file end with the
last writer's list.
"""
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence, Union
from codec import decode_document, encode_document
from models import Task

DEFAULT_TASKS_FILE = 'tasks.json'
TASKS_FILE_ENV = 'TASK_TRACKER_FILE'

logger = logging.getLogger(__name__)


class StorageUnavailable(OSError):
    """The tasks file could not be read or written."""


def default_path() -> Path:
    return Path(os.environ.get(TASKS_FILE_ENV) or DEFAULT_TASKS_FILE)


class Storage(ABC):
    """Base port: subclasses provide load_text/save_text."""

    @abstractmethod
    def load_text(self) -> str:
        ...

    @abstractmethod
    def save_text(self, text: str) -> None:
        ...

    def load(self) -> List[Task]:
        """Decode the stored document; unreadable records are logged and skipped."""
        tasks, warnings = decode_document(self.load_text())
        for warning in warnings:
            logger.warning("%s", warning)
        logger.debug("loaded %d task(s) from %s", len(tasks), self)
        return tasks

    def save(self, tasks: Sequence[Task]) -> None:
        # fully encoded before the destination is opened
        text = encode_document(tasks)
        self.save_text(text)
        logger.debug("saved %d task(s) to %s", len(tasks), self)


class FileStorage(Storage):
    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path: Path = Path(path) if path is not None else default_path()

    def load_text(self) -> str:
        """Missing file -> empty document."""
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return f.read()
        except FileNotFoundError:
            return ''
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageUnavailable(f'Error reading tasks file {self.path}: {exc}') from exc

    def save_text(self, text: str) -> None:
        # the file is only opened (and truncated) once the bytes exist
        try:
            data = text.encode('utf-8')
        except UnicodeEncodeError as exc:
            raise StorageUnavailable(f'Error saving tasks to {self.path}: {exc}') from exc
        try:
            if self.path.parent != Path('.'):
                self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'wb') as f:
                f.write(data)
        except OSError as exc:
            raise StorageUnavailable(f'Error saving tasks to {self.path}: {exc}') from exc

    def __str__(self) -> str:
        return str(self.path)


class MemoryStorage(Storage):
    def __init__(self, text: str = ''):
        self.text = text
        self.saves = 0

    def load_text(self) -> str:
        return self.text

    def save_text(self, text: str) -> None:
        self.text = text
        self.saves += 1

    def __str__(self) -> str:
        return '<memory>'
