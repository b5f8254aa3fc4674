"""
A small task graph.

A task runs its dependencies one after another, then its own function,
then its group of subtasks concurrently. Within one top-level run every
task executes at most once, however many tasks depend on it.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .errors import TaskError

logger = logging.getLogger(__name__)


@dataclass
class Task:
    name: str
    func: Optional[Callable] = None
    deps: List[str] = field(default_factory=list)
    group: List[str] = field(default_factory=list)
    help: str = ''


def succeeded(outcome) -> bool:
    """Interpret a task's return value: results with failures or non-empty problem maps fail."""
    if outcome is None or outcome is True:
        return True
    if outcome is False:
        return False
    failed = getattr(outcome, 'failed', None)
    if failed is not None:
        return not failed
    if isinstance(outcome, dict):
        return not outcome
    return True


class TaskRun:
    """State of one top-level run: what has executed and whether it all succeeded."""

    def __init__(self):
        self.done = set()
        self.ok = True
        self._lock = threading.Lock()

    def claim(self, name: str) -> bool:
        with self._lock:
            if name in self.done:
                return False
            self.done.add(name)
            return True

    def record(self, ok: bool) -> None:
        with self._lock:
            self.ok = self.ok and ok


class TaskGraph:
    def __init__(self, max_workers: int = None):
        self.tasks = {}
        self.max_workers = max_workers

    def task(self, name: str, func: Callable = None, deps=None, group=None, help: str = '') -> Task:
        """Register a task."""
        task = Task(name, func, list(deps or []), list(group or []), help)
        self.tasks[name] = task
        return task

    def alias(self, name: str, target: str) -> Task:
        return self.task(name, group=[target], help=f"Alias for '{target}'.")

    def get(self, name: str) -> Task:
        try:
            return self.tasks[name]
        except KeyError:
            raise TaskError(f"Unknown task: {name}")

    def validate(self) -> None:
        """Raise TaskError for unknown references or dependency cycles."""
        for name in self.tasks:
            self._check(name, [])

    def _check(self, name: str, stack: List[str]) -> None:
        if name in stack:
            raise TaskError(f"Task cycle: {' -> '.join(stack + [name])}")
        task = self.get(name)
        for child in task.deps + task.group:
            self._check(child, stack + [name])

    def run(self, name: str) -> bool:
        """Run a task with its dependencies; return True when nothing failed."""
        self._check(name, [])
        state = TaskRun()
        self._run(name, state)
        return state.ok

    def run_sequence(self, names: List[str]) -> bool:
        """Run several tasks one after another, sharing one run state."""
        for name in names:
            self._check(name, [])
        state = TaskRun()
        for name in names:
            self._run(name, state)
        return state.ok

    def _run(self, name: str, state: TaskRun) -> None:
        if not state.claim(name):
            return
        task = self.get(name)

        for dep in task.deps:
            self._run(dep, state)

        if task.func is not None:
            start = time.time()
            logger.info(f"Starting '{name}'...")
            try:
                outcome = task.func()
            except Exception as e:
                logger.error(f"Task '{name}' failed: {e}")
                state.record(False)
                return
            state.record(succeeded(outcome))
            logger.info(f"Finished '{name}' after {time.time() - start:.3f} s")

        if len(task.group) == 1:
            self._run(task.group[0], state)
        elif task.group:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = [executor.submit(self._run, child, state) for child in task.group]
                for future in futures:
                    future.result()

    def describe(self) -> List[str]:
        """One line per task that has help text."""
        return [f"  {task.name:<16} {task.help}" for task in self.tasks.values() if task.help]
