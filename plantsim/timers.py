"""
Fire-once scheduled tasks measured in engine ticks.

Every handle remembers the scheduler generation it was created in;
``cancel_all`` bumps the generation so nothing scheduled before a reset can
fire after it.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List

logger = logging.getLogger("TaskScheduler")


@dataclass
class ScheduledTask:
    name: str
    due_tick: int
    callback: Callable[[], None]
    generation: int
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class TaskScheduler:
    def __init__(self):
        self._tasks: Dict[str, ScheduledTask] = {}
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def schedule(self, name: str, due_tick: int, callback: Callable[[], None]) -> ScheduledTask:
        """Schedule ``callback`` for ``due_tick``; an existing task of the same name is replaced."""
        previous = self._tasks.get(name)
        if previous is not None:
            previous.cancel()
        task = ScheduledTask(name, due_tick, callback, self._generation)
        self._tasks[name] = task
        logger.debug(f"Scheduled '{name}' for tick {due_tick}")
        return task

    def cancel(self, name: str) -> bool:
        task = self._tasks.pop(name, None)
        if task is None:
            return False
        task.cancel()
        return True

    def cancel_all(self) -> None:
        for task in self._tasks.values():
            task.cancel()
        self._tasks.clear()
        self._generation += 1

    def pending(self) -> List[str]:
        return sorted(self._tasks)

    def is_pending(self, name: str) -> bool:
        return name in self._tasks

    def run_due(self, tick: int) -> int:
        """Fire every task due at or before ``tick``. Returns the number fired."""
        due = [t for t in self._tasks.values() if t.due_tick <= tick]
        fired = 0
        for task in sorted(due, key=lambda t: t.due_tick):
            # A callback may cancel_all() or replace later tasks
            if task.cancelled or task.generation != self._generation:
                continue
            if self._tasks.get(task.name) is task:
                del self._tasks[task.name]
            task.cancelled = True
            task.callback()
            fired += 1
        return fired
