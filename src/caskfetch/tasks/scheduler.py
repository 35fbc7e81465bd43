"""Fire-and-forget scheduling of delayed maintenance work.

A scheduled task runs after a fixed delay in a detached unit of execution.
It has no handle, no cancellation and no error channel: failures are logged
inside the task and never reach the caller. The delay is a debounce that
assumes the caller finishes its primary work first; it is not a
synchronization primitive. A task still pending when the host process
terminates may be lost.

Tasks must receive everything they need as arguments. By the time a task
runs, the state of the code that scheduled it may be gone.
"""

import copy
import logging
import os
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


def run_task(delay_seconds: float, action: Callable, args: tuple, kwargs: dict) -> None:
    """Sleep, then run ``action``; log and drop any exception it raises."""
    if delay_seconds > 0:
        time.sleep(delay_seconds)
    name = getattr(action, "__name__", repr(action))
    try:
        action(*args, **kwargs)
    except Exception:
        logger.exception(f"Deferred task {name} failed")
    else:
        logger.debug(f"Deferred task {name} finished")


class DeferredTaskScheduler(ABC):
    """Launches delayed, detached, best-effort tasks."""

    @abstractmethod
    def schedule(
        self, delay_seconds: float, action: Callable, *args: Any, **kwargs: Any
    ) -> None:
        """Run ``action(*args, **kwargs)`` after ``delay_seconds``.

        Returns immediately. Nothing about the task's outcome is reported.
        """
        pass


class ProcessScheduler(DeferredTaskScheduler):
    """Runs tasks in a detached process.

    The task process is double-forked into its own session, so it is never
    a zombie of the caller and survives the caller's exit. The caller's
    memory is copied at fork time, which captures every argument by value.
    """

    def schedule(
        self, delay_seconds: float, action: Callable, *args: Any, **kwargs: Any
    ) -> None:
        try:
            pid = os.fork()
        except OSError as e:
            logger.warning(f"Could not fork deferred task: {e}")
            return

        if pid:
            # Reap the intermediate child
            os.waitpid(pid, 0)
            return

        try:
            os.setsid()
            # Intermediate child exits right after forking the task process
            if os.fork():
                os._exit(0)
            run_task(delay_seconds, action, args, kwargs)
        finally:
            os._exit(0)


class ThreadScheduler(DeferredTaskScheduler):
    """Runs tasks in daemon threads, for platforms without ``fork``.

    Arguments are deep-copied before the thread starts. Daemon threads do
    not keep the interpreter alive, so tasks pending at exit are lost.
    """

    def schedule(
        self, delay_seconds: float, action: Callable, *args: Any, **kwargs: Any
    ) -> None:
        thread = threading.Thread(
            target=run_task,
            args=(delay_seconds, action, copy.deepcopy(args), copy.deepcopy(kwargs)),
            name=f"deferred-{getattr(action, '__name__', 'task')}",
            daemon=True,
        )
        thread.start()


_default_scheduler: Optional[DeferredTaskScheduler] = None


def get_scheduler() -> DeferredTaskScheduler:
    """Get the process-wide default scheduler.

    Returns:
        ProcessScheduler where ``os.fork`` exists, ThreadScheduler otherwise
    """
    global _default_scheduler
    if _default_scheduler is None:
        if hasattr(os, "fork"):
            _default_scheduler = ProcessScheduler()
        else:
            _default_scheduler = ThreadScheduler()
    return _default_scheduler


def set_scheduler(scheduler: Optional[DeferredTaskScheduler]) -> None:
    """Replace the process-wide default scheduler (None resets it)."""
    global _default_scheduler
    _default_scheduler = scheduler
