"""Asynchronous task protocol: submit, fetch, verify callbacks and poll.

Public API::

    from kieai.core.tasks import (
        BaseTaskModule,
        CallbackDispatcher,
        FlagTaskModule,
        JobsModule,
    )
"""

from kieai.core.tasks.base import BaseTaskModule
from kieai.core.tasks.dispatch import CallbackDispatcher
from kieai.core.tasks.flagged import FlagTaskModule
from kieai.core.tasks.jobs import JobsModule

__all__ = [
    "BaseTaskModule",
    "CallbackDispatcher",
    "FlagTaskModule",
    "JobsModule",
]
