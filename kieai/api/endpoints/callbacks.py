"""Callback endpoint -- verifies a webhook and forwards the fresh record.

The posted body is never trusted: only its ``data.taskId`` (and, for
multi-model plugins, ``data.model``) is read, and the task record is
re-fetched from the API before the handler sees it.
"""

from __future__ import annotations

import inspect
import json
from typing import Any

from fastapi import APIRouter, Depends, Request

from kieai.api.dependencies import TaskHandler, get_sdk, get_task_handler
from kieai.api.schemas import CallbackAck
from kieai.core.sdk import KieAI
from kieai.core.tasks.models import FlagTaskRecord, JobRecord
from kieai.utils.exceptions import ValidationError
from kieai.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


def record_state(record: JobRecord | FlagTaskRecord) -> str:
    """Lifecycle label of *record* in either status encoding."""
    if isinstance(record, FlagTaskRecord):
        return record.success_flag.name.lower()
    return record.state.value


async def _read_payload(request: Request) -> Any:
    try:
        return await request.json()
    except json.JSONDecodeError as exc:
        raise ValidationError(
            "Invalid callback data: body is not valid JSON",
            context={"path": request.url.path},
        ) from exc


@router.post(
    "/callbacks/{plugin_name}",
    response_model=CallbackAck,
    summary="Receive a task callback",
    description="Re-fetch the task named by the callback and hand it to the handler.",
)
async def receive_callback(
    plugin_name: str,
    request: Request,
    sdk: KieAI = Depends(get_sdk),
    on_task: TaskHandler | None = Depends(get_task_handler),
) -> CallbackAck:
    api = sdk.get(plugin_name)
    if not callable(getattr(api, "verify_callback", None)):
        raise ValidationError(
            f'Plugin "{plugin_name}" does not accept callbacks',
            hint="Only task plugins exposing verify_callback can receive webhooks",
            context={"plugin_name": plugin_name},
        )
    payload = await _read_payload(request)
    record = await api.verify_callback(payload)

    logger.info(
        "callback_verified",
        plugin=plugin_name,
        task_id=record.task_id,
        state=record_state(record),
    )

    if on_task is not None:
        result = on_task(plugin_name, record)
        if inspect.isawaitable(result):
            await result

    return CallbackAck(task_id=record.task_id, state=record_state(record))
