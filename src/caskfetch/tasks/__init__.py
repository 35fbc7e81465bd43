"""Deferred maintenance tasks.

- DeferredTaskScheduler: Fire-and-forget delayed execution
- schedule_source_patch: Post-install rewrite of relative requires
"""

from caskfetch.tasks.scheduler import (
    DeferredTaskScheduler,
    ProcessScheduler,
    ThreadScheduler,
    get_scheduler,
    set_scheduler,
)
from caskfetch.tasks.source_patch import (
    INSTALL_COMMANDS,
    patch_definition_copy,
    schedule_source_patch,
)

__all__ = [
    "DeferredTaskScheduler",
    "ProcessScheduler",
    "ThreadScheduler",
    "get_scheduler",
    "set_scheduler",
    "INSTALL_COMMANDS",
    "patch_definition_copy",
    "schedule_source_patch",
]
