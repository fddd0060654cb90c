"""Generic jobs protocol shared by most model capabilities.

One :class:`JobsModule` instance is bound to a single model identifier.  It
submits ``{"model", "input", "callBackUrl"}`` to ``createTask`` and reads
snapshots back from ``recordInfo``.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from kieai.core.http.client import HttpClient
from kieai.core.tasks.base import BaseTaskModule, parse_create_response, require_task_id
from kieai.core.tasks.models import (
    CreateTaskResponse,
    Failed,
    JobRecord,
    Pending,
    Succeeded,
    TaskOutcome,
    TaskState,
)
from kieai.utils.decoding import decode_mapping, decode_optional
from kieai.utils.exceptions import HttpFailureError, ValidationError
from kieai.utils.logging import get_logger

logger = get_logger(__name__)


def validate_input(
    input_model: type[BaseModel] | None,
    data: Mapping[str, Any],
) -> dict[str, Any]:
    """Check *data* against a capability option schema.

    Returns the validated mapping without unset optional fields.  Schema
    violations become :class:`ValidationError` naming the offending field.
    """
    if input_model is None:
        return dict(data)
    try:
        parsed = input_model.model_validate(dict(data))
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "input"
        raise ValidationError(
            f"{field}: {first.get('msg', 'invalid value')}",
            context={
                "field": field,
                "value": first.get("input"),
                "schema": input_model.__name__,
            },
        ) from exc
    return parsed.model_dump(exclude_none=True, by_alias=True)


class JobsModule(BaseTaskModule):
    """Create and query tasks for one model through the jobs protocol.

    Parameters
    ----------
    model:
        Model identifier injected into every request (e.g.
        ``"kling/v2-1-pro"``).
    client:
        Shared :class:`HttpClient`.
    input_model:
        Optional pydantic schema the ``input`` mapping must satisfy.
    max_wait_time, poll_interval:
        Override the class-level polling defaults for this variant.
    """

    create_path = "/api/v1/jobs/createTask"
    record_path = "/api/v1/jobs/recordInfo"

    def __init__(
        self,
        model: str,
        client: HttpClient,
        *,
        input_model: type[BaseModel] | None = None,
        max_wait_time: float | None = None,
        poll_interval: float | None = None,
    ) -> None:
        super().__init__(client)
        self.model = model.value if isinstance(model, Enum) else str(model)
        self.input_model = input_model
        if max_wait_time is not None:
            self.default_max_wait_time = max_wait_time
        if poll_interval is not None:
            self.default_poll_interval = poll_interval

    async def create_task(
        self,
        input: Mapping[str, Any] | None,
        callback_url: str | None = None,
    ) -> CreateTaskResponse:
        if input is None:
            raise ValidationError("input is required", context={"field": "input"})
        if not isinstance(input, Mapping):
            raise ValidationError(
                "input must be a mapping",
                context={"field": "input", "type": type(input).__name__},
            )

        payload = {
            "model": self.model,
            "input": validate_input(self.input_model, input),
            "callBackUrl": callback_url,
        }
        data = await self.client.post(self.create_path, json=payload)
        response = parse_create_response(data, self.create_path)
        logger.info("task_created", model=self.model, task_id=response.task_id)
        return response

    async def get_task_record(self, task_id: str) -> JobRecord:
        require_task_id(task_id)
        data = await self.client.get(self.record_path, params={"taskId": task_id})
        return self.parse_record(data)

    def parse_record(self, data: Any) -> JobRecord:
        """Build a :class:`JobRecord` from a raw ``recordInfo`` payload.

        ``param`` degrades to ``{}`` and ``result`` to ``None`` when the
        embedded JSON strings are malformed.
        """
        if not isinstance(data, Mapping):
            raise HttpFailureError(
                "Task record payload is not an object",
                context={"path": self.record_path, "response": data},
            )
        raw = dict(data)
        raw["param"] = decode_mapping(raw.get("param"))
        raw["result"] = decode_optional(raw.get("resultJson"))
        try:
            return JobRecord.model_validate(raw)
        except PydanticValidationError as exc:
            raise HttpFailureError(
                "Task record payload has an unexpected shape",
                context={
                    "path": self.record_path,
                    "task_id": raw.get("taskId"),
                    "errors": [e.get("msg") for e in exc.errors()],
                },
            ) from exc

    def outcome(self, record: JobRecord) -> TaskOutcome:
        if record.state is TaskState.SUCCESS:
            return Succeeded(result=record.result)
        if record.state is TaskState.FAIL:
            return Failed(code=record.fail_code, message=record.fail_msg, reason="fail")
        return Pending(state=record.state.value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r})"
