"""Command-line interface for the task tracker.

Every command is one load -> mutate/query -> save cycle against the storage
object carried in the click context. Tests pass their own Storage through
``obj=``; a normal run gets a FileStorage for --file (or TASK_TRACKER_FILE,
or ./tasks.json).
"""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional
import click
from models import Priority
from storage import FileStorage, Storage, StorageUnavailable
from tracker import (DISPLAY_STYLES, LIST_FILTERS, SORT_KEYS, EmptyDescription,
                     TaskList, TaskNotFound)

STYLE_ENV = 'TASK_TRACKER_STYLE'
PRIORITY_CHOICES = [p.value for p in Priority]

EPILOG = """\b
Examples:
  task-tracker add "Buy groceries" --priority high
  task-tracker list
  task-tracker list done
  task-tracker mark-in-progress 1
  task-tracker mark-done 1
  task-tracker update 1 "Buy groceries and cook dinner"
  task-tracker delete 1
"""


@contextmanager
def _session(storage: Storage, save: bool = True) -> Iterator[TaskList]:
    """Load the list, hand it to the command, persist it if the command succeeded."""
    try:
        tasks = TaskList(storage.load())
        yield tasks
        if save:
            storage.save(tasks.tasks)
    except (TaskNotFound, EmptyDescription, StorageUnavailable) as exc:
        raise click.ClickException(str(exc)) from exc


@click.group(epilog=EPILOG, context_settings={'help_option_names': ['-h', '--help']})
@click.option('--file', 'path', type=click.Path(dir_okay=False), default=None,
              help='Tasks file (default: $TASK_TRACKER_FILE or ./tasks.json).')
@click.option('-v', '--verbose', is_flag=True, help='Log debug output to stderr.')
@click.pass_context
def cli(ctx: click.Context, path: Optional[str], verbose: bool) -> None:
    """Track tasks in a local JSON file."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    if ctx.obj is None:
        ctx.obj = FileStorage(path)


@cli.command()
@click.argument('description')
@click.option('--priority', type=click.Choice(PRIORITY_CHOICES, case_sensitive=False),
              default='medium', show_default=True)
@click.pass_obj
def add(storage: Storage, description: str, priority: str) -> None:
    """Add a new task."""
    with _session(storage) as tasks:
        task = tasks.add(description, Priority.parse(priority))
    click.echo(f'Task added successfully (ID: {task.id})')


@cli.command()
@click.argument('task_id', type=int)
@click.argument('description')
@click.pass_obj
def update(storage: Storage, task_id: int, description: str) -> None:
    """Replace a task's description."""
    with _session(storage) as tasks:
        tasks.update(task_id, description)
    click.echo('Task updated successfully')


@cli.command()
@click.argument('task_id', type=int)
@click.pass_obj
def delete(storage: Storage, task_id: int) -> None:
    """Delete a task."""
    with _session(storage) as tasks:
        tasks.delete(task_id)
    click.echo('Task deleted successfully')


def _mark_command(name: str, status: str) -> click.Command:
    @cli.command(name, help=f'Mark a task as {status}.')
    @click.argument('task_id', type=int)
    @click.pass_obj
    def command(storage: Storage, task_id: int) -> None:
        with _session(storage) as tasks:
            tasks.mark(task_id, status)
        click.echo(f'Task marked as {status}')
    return command


mark_todo = _mark_command('mark-todo', 'todo')
mark_in_progress = _mark_command('mark-in-progress', 'in-progress')
mark_done = _mark_command('mark-done', 'done')


@cli.command('set-priority')
@click.argument('task_id', type=int)
@click.argument('priority', type=click.Choice(PRIORITY_CHOICES, case_sensitive=False))
@click.pass_obj
def set_priority(storage: Storage, task_id: int, priority: str) -> None:
    """Change a task's priority."""
    with _session(storage) as tasks:
        task = tasks.set_priority(task_id, Priority.parse(priority))
    click.echo(f'Task priority set to {task.priority.value}')


@cli.command('list')
@click.argument('status_filter', required=False, default='all',
                type=click.Choice(LIST_FILTERS, case_sensitive=False))
@click.option('--sort', 'sort_key', type=click.Choice(SORT_KEYS), default='insertion',
              show_default=True, help='Row order; "priority" lists high before low.')
@click.option('--style', type=click.Choice(DISPLAY_STYLES), default='plain',
              envvar=STYLE_ENV, show_default=True,
              help='"decorated" adds colour and emoji priority labels.')
@click.pass_obj
def list_tasks(storage: Storage, status_filter: str, sort_key: str, style: str) -> None:
    """List tasks, optionally only those with one status."""
    with _session(storage, save=False) as tasks:
        lines = tasks.render(status_filter, sort_key, style)
    for line in lines:
        click.echo(line)
