#!/usr/bin/env python3
"""Main entry point for CronGuard."""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import Callable, Optional

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

# Add src to path
sys.path.insert(0, str(Path(__file__).parent))

from config import settings
from scheduler import Scheduler, get_cron_description

logger = logging.getLogger(__name__)


def configure_logging():
    handlers = [logging.StreamHandler()]
    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.log_file))
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def load_registrar(target: str) -> Callable[[Scheduler], None]:
    """Resolve a "module:function" string to the function that registers tasks."""
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise ValueError(f"Schedule target must look like 'module:function', got '{target}'")
    module = importlib.import_module(module_name)
    return getattr(module, attr)


def build_scheduler(target: Optional[str]) -> Scheduler:
    scheduler = Scheduler()
    if target:
        load_registrar(target)(scheduler)
        logger.debug(f"Loaded {len(scheduler.tasks)} task(s) from {target}")
    else:
        logger.warning("No schedule target given, nothing is registered")
    return scheduler


def run_once(scheduler: Scheduler) -> int:
    if not scheduler.run():
        logger.info("No scheduled tasks to run")
    return 0


def list_tasks(scheduler: Scheduler) -> int:
    for task in scheduler.tasks:
        next_run = scheduler.next_run(task)
        print(f"[{task.index}] {task.label}")
        print(f"    expression:  {task.expression} ({get_cron_description(task.expression)})")
        if task.description:
            print(f"    description: {task.description}")
        print(f"    next due:    {next_run.isoformat() if next_run else 'unknown'}")
    if not scheduler.tasks:
        print("No scheduled tasks")
    return 0


def work(scheduler: Scheduler) -> int:
    """Call the run pass on every tick until interrupted."""
    # Five-field expressions only need one check per minute
    trigger = CronTrigger(second="*") if scheduler.uses_seconds() else CronTrigger(second=0)

    worker = BlockingScheduler(job_defaults=settings.worker_job_defaults)
    worker.add_job(scheduler.run, trigger=trigger, id="cronguard_run_pass",
                   name="CronGuard run pass")

    logger.info(f"Worker started, checking {len(scheduler.tasks)} task(s)")
    try:
        worker.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Shutting down worker...")
    return 0


def clear_locks(scheduler: Scheduler) -> int:
    removed = scheduler.guard.clear()
    print(f"Removed {removed} lock marker(s)")
    return 0


COMMANDS = {
    "run": run_once,
    "list": list_tasks,
    "work": work,
    "clear-locks": clear_locks,
}


def main(argv=None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="CronGuard task scheduler")
    parser.add_argument(
        "command",
        choices=sorted(COMMANDS),
        help="run: one pass, list: show tasks, work: run every tick, clear-locks: remove overlap markers"
    )
    parser.add_argument(
        "--schedule",
        default=settings.schedule_target,
        help="Function registering tasks, as module:function "
             f"(default: {settings.schedule_target})"
    )
    parser.add_argument(
        "--env",
        default=None,
        help=f"Override the application environment (default: {settings.environment})"
    )

    args = parser.parse_args(argv)

    if args.env:
        settings.environment = args.env

    configure_logging()

    try:
        scheduler = build_scheduler(args.schedule)
        return COMMANDS[args.command](scheduler)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
