"""Tests for the click command layer, run against in-memory and file storage."""

import sys
from pathlib import Path

from click.testing import CliRunner

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from cli import cli
from codec import decode_document, encode_document
from models import Priority, Task
from storage import MemoryStorage, StorageUnavailable


def _invoke(storage: MemoryStorage, *args: str):
    return CliRunner().invoke(cli, list(args), obj=storage)


def _stored(storage: MemoryStorage) -> list:
    tasks, warnings = decode_document(storage.text)
    assert warnings == []
    return tasks


def test_add_persists_task_with_priority() -> None:
    storage = MemoryStorage()

    result = _invoke(storage, "add", "Buy milk, eggs", "--priority", "HIGH")

    assert result.exit_code == 0, result.output
    assert result.output == "Task added successfully (ID: 1)\n"
    [task] = _stored(storage)
    assert task.description == "Buy milk, eggs"
    assert task.priority is Priority.HIGH
    assert task.status == "todo"


def test_full_lifecycle() -> None:
    storage = MemoryStorage()
    _invoke(storage, "add", "First")
    _invoke(storage, "add", "Second")

    assert _invoke(storage, "update", "1", 'First, with "quotes"').output == "Task updated successfully\n"
    assert _invoke(storage, "mark-in-progress", "1").output == "Task marked as in-progress\n"
    assert _invoke(storage, "mark-done", "2").output == "Task marked as done\n"
    assert _invoke(storage, "set-priority", "2", "low").output == "Task priority set to low\n"
    assert _invoke(storage, "mark-todo", "2").output == "Task marked as todo\n"

    first, second = _stored(storage)
    assert first.description == 'First, with "quotes"'
    assert first.status == "in-progress"
    assert second.status == "todo"
    assert second.priority is Priority.LOW

    assert _invoke(storage, "delete", "1").output == "Task deleted successfully\n"
    assert [t.id for t in _stored(storage)] == [2]


def test_missing_task_is_an_error_and_nothing_is_saved() -> None:
    storage = MemoryStorage()
    _invoke(storage, "add", "Only task")
    saves = storage.saves

    result = _invoke(storage, "mark-done", "5")

    assert result.exit_code == 1
    assert "Task with ID 5 not found" in result.output
    assert storage.saves == saves


def test_empty_description_is_rejected() -> None:
    storage = MemoryStorage()

    result = _invoke(storage, "add", "   ")

    assert result.exit_code == 1
    assert "Task description cannot be empty" in result.output
    assert storage.saves == 0


def test_non_numeric_id_is_a_usage_error() -> None:
    result = _invoke(MemoryStorage(), "delete", "abc")

    assert result.exit_code == 2


def test_list_outputs_table_and_does_not_save() -> None:
    tasks = [
        Task(id=1, description="Low one", priority=Priority.LOW,
             created_at="2024-01-01 10:00:00", updated_at="2024-01-01 10:00:00"),
        Task(id=2, description="High one", priority=Priority.HIGH, status="done",
             created_at="2024-01-01 11:00:00", updated_at="2024-01-01 11:00:00"),
    ]
    storage = MemoryStorage(encode_document(tasks))

    result = _invoke(storage, "list", "--sort", "priority")

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0] == "Tasks:"
    assert "High one" in lines[3]
    assert "Low one" in lines[4]
    assert storage.saves == 0


def test_list_filters_by_status() -> None:
    storage = MemoryStorage()
    _invoke(storage, "add", "Pending")

    assert _invoke(storage, "list", "done").output == "No tasks found with status: done\n"
    assert _invoke(storage, "list", "TODO").output.startswith("Tasks (todo):\n")


def test_list_decorated_style() -> None:
    storage = MemoryStorage()
    _invoke(storage, "add", "Urgent", "--priority", "high")

    result = _invoke(storage, "list", "--style", "decorated")

    assert "\U0001F534 HIGH" in result.output


def test_list_skips_malformed_records() -> None:
    good = Task(id=2, description="good", created_at="2024-01-01 10:00:00",
                updated_at="2024-01-01 10:00:00")
    text = encode_document([good]).replace(
        "[\n", '[\n  {"id": "abc", "description": "bad", "status": "todo",'
               ' "createdAt": "x", "updatedAt": "y"},\n', 1)
    storage = MemoryStorage(text)

    result = _invoke(storage, "list")

    assert result.exit_code == 0, result.output
    assert "good" in result.output
    assert "bad" not in result.output.split("Tasks:")[-1]


def test_file_option_uses_file_storage(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    runner = CliRunner()

    result = runner.invoke(cli, ["--file", str(path), "add", "On disk"])

    assert result.exit_code == 0, result.output
    tasks, _ = decode_document(path.read_text(encoding="utf-8"))
    assert [t.description for t in tasks] == ["On disk"]
    listed = runner.invoke(cli, ["--file", str(path), "list"])
    assert "On disk" in listed.output


class _BrokenStorage(MemoryStorage):
    def load_text(self) -> str:
        raise StorageUnavailable("Error reading tasks file: disk on fire")


def test_storage_failure_is_fatal() -> None:
    result = _invoke(_BrokenStorage(), "list")

    assert result.exit_code == 1
    assert "disk on fire" in result.output


def test_directory_as_file_is_rejected(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["--file", str(tmp_path), "list"])

    assert result.exit_code == 2


def test_unsaveable_description_keeps_existing_file(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    runner = CliRunner()
    runner.invoke(cli, ["--file", str(path), "add", "Existing task"])
    before = path.read_bytes()

    result = runner.invoke(cli, ["--file", str(path), "add", "bad \udcff byte"])

    assert result.exit_code == 1
    assert "Error saving tasks" in result.output
    assert path.read_bytes() == before


def test_unreadable_path_is_a_clean_error(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["--file", str(tmp_path / ("x" * 300)), "list"])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Error reading tasks file" in result.output
