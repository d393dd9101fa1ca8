"""Task registry and the run pass that executes due tasks."""

from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union
import logging

from config import Settings, settings as default_settings
from models import Task, TaskConditions, TaskState, DEFAULT_EXPRESSION
from .builder import TaskHandle
from .conditions import ConditionEvaluator
from .cron_parser import matches, parse_cron_expression
from .exceptions import NoTaskToModify, SchedulerError
from .overlap import OverlapGuard

logger = logging.getLogger(__name__)

Conditions = Union[TaskConditions, Mapping[str, Any], None]


class Scheduler:
    """Holds registered tasks and runs the ones that are due.

    The scheduler never sleeps or loops by itself. Something external (cron,
    a systemd timer, ``main.py work``) calls ``run`` once per tick and every
    task is checked against that moment, in registration order.
    """

    def __init__(self, settings: Optional[Settings] = None,
                 guard: Optional[OverlapGuard] = None,
                 dispatcher=None, job_queue=None):
        self.settings = settings or default_settings
        self.guard = guard or OverlapGuard(self.settings.lock_dir)
        self.evaluator = ConditionEvaluator(self.settings)
        self.job_queue = job_queue
        self._dispatcher = dispatcher
        self._tasks: List[Task] = []

    @property
    def tasks(self) -> Sequence[Task]:
        return tuple(self._tasks)

    @property
    def dispatcher(self):
        if self._dispatcher is None:
            from executors import ShellDispatcher
            self._dispatcher = ShellDispatcher(timeout=self.settings.command_timeout)
        return self._dispatcher

    def schedule(self, action: Callable[[], Any], expression: str = DEFAULT_EXPRESSION,
                 conditions: Conditions = None) -> TaskHandle:
        """Register a task and return a handle for chaining modifiers."""
        task = Task(
            action=action,
            expression=expression,
            conditions=TaskConditions.from_mapping(conditions),
            index=len(self._tasks)
        )
        self._tasks.append(task)
        logger.debug(f"Registered {task.label} (index {task.index}) with '{expression}'")
        return TaskHandle(task)

    def command(self, command: str, args: Optional[List[str]] = None,
                expression: str = DEFAULT_EXPRESSION, conditions: Conditions = None) -> TaskHandle:
        """Register a task that runs a console command through the dispatcher."""
        def action():
            return self.dispatcher.call(command, args or [])

        return self.schedule(action, expression, conditions).name(command)

    def job(self, job: str, data: Any = None, queue: str = "default", delay: int = 0,
            expression: str = DEFAULT_EXPRESSION, conditions: Conditions = None) -> TaskHandle:
        """Register a task that pushes a job onto the job queue."""
        if self.job_queue is None:
            raise SchedulerError("No job queue configured for the scheduler")
        job_queue = self.job_queue

        def action():
            return job_queue.add(job, data, queue, delay)

        return self.schedule(action, expression, conditions).name(f"{job} -> {queue}")

    def latest(self) -> TaskHandle:
        """Handle for the most recently registered task."""
        if not self._tasks:
            raise NoTaskToModify()
        return TaskHandle(self._tasks[-1])

    def is_due(self, task: Task, now: datetime) -> bool:
        """Check conditions and expression, without touching the overlap guard."""
        if not self.evaluator.should_run(task, now):
            return False
        if not matches(task.expression, self.evaluator.localize(task, now)):
            logger.debug(f"Skipping {task.label}: '{task.expression}' does not match")
            return False
        return True

    def due_tasks(self, now: Optional[datetime] = None) -> List[Task]:
        now = now or datetime.now()
        return [task for task in self._tasks if self.is_due(task, now)]

    def next_run(self, task: Task, now: Optional[datetime] = None) -> Optional[datetime]:
        """Next time the task's expression matches, ignoring other conditions."""
        now = self.evaluator.localize(task, now or datetime.now())
        return parse_cron_expression(task.expression, now)

    def run_task(self, task: Task, now: datetime) -> TaskState:
        """Take one task through gating and, if due, execute it."""
        task.last_state = TaskState.PENDING
        if not self.is_due(task, now):
            task.last_state = TaskState.SKIPPED
            return task.last_state

        guarded = task.conditions.without_overlapping
        if guarded and not self.guard.try_acquire(task.index):
            task.last_state = TaskState.SKIPPED
            return task.last_state

        logger.info(f"Running {task.label}")
        task.last_state = TaskState.RUNNING
        try:
            task.action()
        except Exception:
            task.last_state = TaskState.ABORTED
            logger.error(f"Task {task.label} raised, aborting this pass", exc_info=True)
            raise
        finally:
            if guarded:
                self.guard.release(task.index)

        logger.debug(f"Finished {task.label}")
        task.last_state = TaskState.DONE
        return task.last_state

    def run(self, now: Optional[datetime] = None) -> bool:
        """Run one evaluation pass over every registered task.

        An exception raised by a task action propagates after its lock is
        released, and the tasks after it are not attempted in this pass.

        Returns:
            False if no task is registered, True otherwise
        """
        if not self._tasks:
            logger.debug("No scheduled tasks registered")
            return False

        now = now or datetime.now()
        ran = 0
        for task in self._tasks:
            if self.run_task(task, now) is TaskState.DONE:
                ran += 1

        logger.info(f"Scheduler pass at {now.isoformat()}: {ran} of {len(self._tasks)} task(s) ran")
        return True

    def uses_seconds(self) -> bool:
        """Whether any task needs checking more often than once a minute."""
        return any(len(task.expression.split()) == 6 for task in self._tasks)
