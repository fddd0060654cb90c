"""Task module for capabilities that report a numeric ``successFlag``.

These endpoints take the options object as the request body directly (no
``model``/``input`` envelope) and return records shaped like::

    {"taskId": ..., "paramJson": "...", "successFlag": 0..3,
     "response": {...} | "resultInfoJson": {...},
     "errorCode": ..., "errorMessage": ..., "createTime": ...}
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from kieai.core.http.client import HttpClient
from kieai.core.tasks.base import BaseTaskModule, parse_create_response, require_task_id
from kieai.core.tasks.jobs import validate_input
from kieai.core.tasks.models import (
    CreateTaskResponse,
    Failed,
    FlagTaskRecord,
    Pending,
    Succeeded,
    SuccessFlag,
    TaskOutcome,
)
from kieai.utils.decoding import decode_mapping, decode_optional
from kieai.utils.exceptions import HttpFailureError, ValidationError
from kieai.utils.logging import get_logger

logger = get_logger(__name__)


class FlagTaskModule(BaseTaskModule):
    """Create and query tasks on a ``successFlag`` endpoint pair.

    Parameters
    ----------
    client:
        Shared :class:`HttpClient`.
    generate_path:
        Default creation endpoint, e.g. ``"/api/v1/flux/kontext/generate"``.
    record_path:
        Record lookup endpoint, e.g. ``"/api/v1/flux/kontext/record-info"``.
    input_model:
        Optional pydantic schema for the request body.
    result_field:
        Record key holding the result (``"response"`` or
        ``"resultInfoJson"``); may arrive as an object or a JSON string.
    """

    def __init__(
        self,
        client: HttpClient,
        *,
        generate_path: str,
        record_path: str,
        input_model: type[BaseModel] | None = None,
        result_field: str = "response",
        max_wait_time: float | None = None,
        poll_interval: float | None = None,
    ) -> None:
        super().__init__(client)
        self.generate_path = generate_path
        self.record_path = record_path
        self.input_model = input_model
        self.result_field = result_field
        if max_wait_time is not None:
            self.default_max_wait_time = max_wait_time
        if poll_interval is not None:
            self.default_poll_interval = poll_interval

    async def create_task(
        self,
        options: Mapping[str, Any] | None,
        callback_url: str | None = None,
        *,
        path: str | None = None,
        input_model: type[BaseModel] | None = None,
    ) -> CreateTaskResponse:
        if options is None:
            raise ValidationError("options are required", context={"field": "options"})
        if not isinstance(options, Mapping):
            raise ValidationError(
                "options must be a mapping",
                context={"field": "options", "type": type(options).__name__},
            )

        target = path or self.generate_path
        body = validate_input(input_model or self.input_model, options)
        if callback_url is not None:
            body["callBackUrl"] = callback_url

        data = await self.client.post(target, json=body)
        response = parse_create_response(data, target)
        logger.info("task_created", path=target, task_id=response.task_id)
        return response

    async def get_task_record(self, task_id: str) -> FlagTaskRecord:
        require_task_id(task_id)
        data = await self.client.get(self.record_path, params={"taskId": task_id})
        return self.parse_record(data)

    def parse_record(self, data: Any) -> FlagTaskRecord:
        if not isinstance(data, Mapping):
            raise HttpFailureError(
                "Task record payload is not an object",
                context={"path": self.record_path, "response": data},
            )
        raw = dict(data)
        raw["param"] = decode_mapping(raw.get("paramJson"))
        raw["result"] = decode_optional(raw.get(self.result_field))
        try:
            return FlagTaskRecord.model_validate(raw)
        except PydanticValidationError as exc:
            raise HttpFailureError(
                "Task record payload has an unexpected shape",
                context={
                    "path": self.record_path,
                    "task_id": raw.get("taskId"),
                    "errors": [e.get("msg") for e in exc.errors()],
                },
            ) from exc

    def outcome(self, record: FlagTaskRecord) -> TaskOutcome:
        flag = record.success_flag
        if flag is SuccessFlag.SUCCESS:
            return Succeeded(result=record.result)
        if flag.is_failure:
            return Failed(
                code=record.error_code,
                message=record.error_message,
                reason=flag.name,
            )
        return Pending(state=flag.name.lower())

    def __repr__(self) -> str:
        return f"{type(self).__name__}(generate_path={self.generate_path!r})"
