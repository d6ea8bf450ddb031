"""Task registry and execution helpers."""
import logging
import subprocess
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Sequence

from deskbuild.context import BuildContext
from deskbuild.errors import BuildError, NotFoundError

logger = logging.getLogger(__name__)

TaskFunction = Callable[['TaskRunner', BuildContext], Any]


@dataclass
class Task:
    name: str
    func: TaskFunction
    help: str = ''


class TaskRunner:
    """Registry mapping task names to task functions."""

    def __init__(self, ctx: BuildContext):
        self.ctx = ctx
        self._tasks: dict[str, Task] = {}

    def register(self, name: str, func: TaskFunction, help: str = '') -> None:
        self._tasks[name] = Task(name, func, help)

    def get_task(self, name: str) -> Task:
        task = self._tasks.get(name)
        if task is None:
            raise NotFoundError(f"No such task: {name}")
        return task

    def get_tasks(self) -> list[Task]:
        return list(self._tasks.values())

    def run(self, name: str) -> Any:
        task = self.get_task(name)
        logger.debug("Running task %s", name)
        return task.func(self, self.ctx)

    def run_sequence(self, names: Iterable[str]) -> None:
        """Run tasks one after another; the first failure stops the sequence."""
        for name in names:
            self.run(name)

    @staticmethod
    def run_parallel(*funcs: Callable[[], Any]) -> list[Any]:
        """Run callables concurrently and wait for all of them.

        The first failure (in submission order) is raised once its result is
        collected; siblings already running are not cancelled.
        """
        with ThreadPoolExecutor(max_workers=max(len(funcs), 1)) as pool:
            futures = [pool.submit(f) for f in funcs]
            return [f.result() for f in futures]

    def shell(self, command: Sequence[str], cwd: str | None = None, env: Mapping[str, str] | None = None) -> None:
        """Run an external command, inheriting stdio.

        Raises:
            BuildError: The command is missing or exits non-zero.
        """
        environ = dict(self.ctx.environ)
        environ.update(env or {})
        logger.debug("Executing %s (cwd=%s)", ' '.join(command), cwd or self.ctx.root)

        try:
            completed = subprocess.run(list(command), cwd=cwd or self.ctx.root, env=environ)
        except FileNotFoundError as e:
            raise BuildError(f"Command not found: {command[0]}") from e

        if completed.returncode != 0:
            raise BuildError(f"{command[0]} exited with status {completed.returncode}")
