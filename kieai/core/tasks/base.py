"""Abstract base class for asynchronous generation task modules."""

from __future__ import annotations

import asyncio
import inspect
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from kieai.core.http.client import HttpClient
from kieai.core.tasks.models import CreateTaskResponse, Failed, Succeeded, TaskOutcome
from kieai.utils.exceptions import (
    HttpFailureError,
    TaskFailedError,
    TimeoutError,
    ValidationError,
)
from kieai.utils.logging import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[Any], Any]


def extract_callback_task_id(payload: Any) -> str:
    """Return ``payload["data"]["taskId"]`` or raise :class:`ValidationError`."""
    data = payload.get("data") if isinstance(payload, Mapping) else None
    task_id = data.get("taskId") if isinstance(data, Mapping) else None
    if not isinstance(task_id, str) or not task_id:
        raise ValidationError(
            "Invalid callback data: data.taskId is required",
            context={"field": "data.taskId"},
        )
    return task_id


def require_task_id(task_id: str) -> None:
    if not isinstance(task_id, str) or not task_id:
        raise ValidationError("taskId is required", context={"field": "taskId"})


class BaseTaskModule(ABC):
    """Create, query and await tasks of one model variant.

    Subclasses implement the wire protocol (:meth:`create_task`,
    :meth:`get_task_record`) and map a record onto a normalised outcome
    (:meth:`outcome`).  Callback verification and polling are shared.
    """

    #: Default polling bounds in seconds; video capabilities raise these.
    default_max_wait_time: float = 300.0
    default_poll_interval: float = 3.0

    def __init__(self, client: HttpClient) -> None:
        self.client = client

    @abstractmethod
    async def create_task(self, *args: Any, **kwargs: Any) -> CreateTaskResponse:
        """Submit a generation request and return the server-assigned id."""
        ...

    @abstractmethod
    async def get_task_record(self, task_id: str) -> Any:
        """Fetch a fresh snapshot of *task_id*."""
        ...

    @abstractmethod
    def outcome(self, record: Any) -> TaskOutcome:
        """Map *record* onto ``Pending``, ``Succeeded`` or ``Failed``."""
        ...

    async def verify_callback(self, payload: Any) -> Any:
        """Treat an inbound webhook as a signal and re-fetch the task.

        The callback body itself is never trusted for state or result.
        """
        task_id = extract_callback_task_id(payload)
        return await self.get_task_record(task_id)

    async def wait_for_completion(
        self,
        task_id: str,
        *,
        max_wait_time: float | None = None,
        poll_interval: float | None = None,
        on_progress: ProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Any:
        """Poll *task_id* until it succeeds, fails, or the wait budget runs out.

        Parameters
        ----------
        task_id:
            Identifier returned by :meth:`create_task`.
        max_wait_time:
            Overall budget in seconds (defaults to ``default_max_wait_time``).
        poll_interval:
            Pause between polls in seconds (defaults to
            ``default_poll_interval``).
        on_progress:
            Called once per poll with the latest record; may be async.
        cancel_event:
            When set, the wait stops with :class:`asyncio.CancelledError`.

        Returns
        -------
        The success payload, i.e. the decoded ``result`` of the final record.

        Raises
        ------
        TaskFailedError
            The task reached its terminal failure state.
        TimeoutError
            No terminal state was observed within ``max_wait_time``.
        """
        require_task_id(task_id)
        max_wait = self.default_max_wait_time if max_wait_time is None else max_wait_time
        interval = self.default_poll_interval if poll_interval is None else poll_interval
        if max_wait <= 0:
            raise ValidationError(
                "max_wait_time must be positive",
                context={"field": "max_wait_time", "value": max_wait},
            )
        if interval < 0:
            raise ValidationError(
                "poll_interval must not be negative",
                context={"field": "poll_interval", "value": interval},
            )

        start = time.monotonic()
        polls = 0

        while time.monotonic() - start < max_wait:
            if cancel_event is not None and cancel_event.is_set():
                raise asyncio.CancelledError()

            record = await self.get_task_record(task_id)
            polls += 1

            if on_progress is not None:
                maybe_awaitable = on_progress(record)
                if inspect.isawaitable(maybe_awaitable):
                    await maybe_awaitable

            outcome = self.outcome(record)
            logger.debug(
                "task_poll",
                task_id=task_id,
                poll=polls,
                status=outcome.status,
            )

            if isinstance(outcome, Succeeded):
                logger.info(
                    "task_succeeded",
                    task_id=task_id,
                    polls=polls,
                    elapsed=round(time.monotonic() - start, 3),
                )
                return outcome.result

            if isinstance(outcome, Failed):
                logger.warning(
                    "task_failed",
                    task_id=task_id,
                    fail_code=outcome.code,
                    fail_msg=outcome.message,
                    reason=outcome.reason,
                )
                raise TaskFailedError(
                    task_id,
                    outcome.code,
                    outcome.message,
                    context={"reason": outcome.reason, "polls": polls},
                )

            remaining = max_wait - (time.monotonic() - start)
            if remaining <= 0:
                break
            await self._pause(min(interval, remaining), cancel_event)

        elapsed = round(time.monotonic() - start, 3)
        logger.warning("task_wait_timeout", task_id=task_id, polls=polls, elapsed=elapsed)
        raise TimeoutError(
            f"Task {task_id} did not complete within {max_wait}s",
            hint="Increase max_wait_time or rely on a callback URL instead of polling",
            context={
                "task_id": task_id,
                "max_wait_time": max_wait,
                "elapsed": elapsed,
                "polls": polls,
            },
        )

    @staticmethod
    async def _pause(delay: float, cancel_event: asyncio.Event | None) -> None:
        if cancel_event is None:
            await asyncio.sleep(delay)
            return
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return
        raise asyncio.CancelledError()


def parse_create_response(data: Any, path: str) -> CreateTaskResponse:
    try:
        return CreateTaskResponse.model_validate(data)
    except PydanticValidationError as exc:
        raise HttpFailureError(
            "Create-task response is missing taskId",
            context={"path": path, "response": data},
        ) from exc
