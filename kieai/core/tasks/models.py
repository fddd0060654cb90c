"""Task data models.

Two wire encodings exist for task status:

* the jobs protocol reports a string ``state``
  (``waiting | queuing | generating | success | fail``);
* older capabilities report a numeric ``successFlag``
  (``0`` generating, ``1`` success, ``2`` create-task failed,
  ``3`` generate failed).

Both are normalised into one :data:`TaskOutcome` right after a fetch.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class TaskState(str, Enum):
    """String lifecycle states of the jobs protocol."""

    WAITING = "waiting"
    QUEUING = "queuing"
    GENERATING = "generating"
    SUCCESS = "success"
    FAIL = "fail"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskState.SUCCESS, TaskState.FAIL)


class SuccessFlag(IntEnum):
    """Numeric status codes of the legacy protocol."""

    GENERATING = 0
    SUCCESS = 1
    CREATE_TASK_FAILED = 2
    GENERATE_FAILED = 3

    @property
    def is_failure(self) -> bool:
        return self in (SuccessFlag.CREATE_TASK_FAILED, SuccessFlag.GENERATE_FAILED)


class CreateTaskResponse(BaseModel):
    task_id: str = Field(alias="taskId")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class JobRecord(BaseModel):
    """Snapshot of a task created through the jobs protocol.

    ``param`` and ``result`` are the decoded forms of the wire's JSON
    strings; ``result_json`` keeps the raw payload.
    """

    task_id: str = Field(alias="taskId")
    model: str = ""
    state: TaskState
    param: dict[str, Any] = Field(default_factory=dict)
    result: Any | None = None
    result_json: Any | None = Field(default=None, alias="resultJson")
    fail_code: str | int | None = Field(default=None, alias="failCode")
    fail_msg: str | None = Field(default=None, alias="failMsg")
    create_time: int | None = Field(default=None, alias="createTime")
    update_time: int | None = Field(default=None, alias="updateTime")
    complete_time: int | None = Field(default=None, alias="completeTime")
    cost_time: int | None = Field(default=None, alias="costTime")

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class FlagTaskRecord(BaseModel):
    """Snapshot of a task from a capability using the numeric protocol."""

    task_id: str = Field(alias="taskId")
    task_type: str | None = Field(default=None, alias="taskType")
    success_flag: SuccessFlag = Field(alias="successFlag")
    param: dict[str, Any] = Field(default_factory=dict)
    result: Any | None = None
    error_code: str | int | None = Field(default=None, alias="errorCode")
    error_message: str | None = Field(default=None, alias="errorMessage")
    create_time: int | str | None = Field(default=None, alias="createTime")
    complete_time: int | str | None = Field(default=None, alias="completeTime")

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


# ---------------------------------------------------------------------------
# Normalised outcome
# ---------------------------------------------------------------------------


class Pending(BaseModel):
    """The task has not reached a terminal state yet."""

    status: Literal["pending"] = "pending"
    state: str


class Succeeded(BaseModel):
    status: Literal["succeeded"] = "succeeded"
    result: Any | None = None


class Failed(BaseModel):
    """Terminal failure.

    ``reason`` keeps the capability-specific failure subkind (e.g.
    ``GENERATE_FAILED``) for diagnostics; callers treat every ``Failed``
    the same way.
    """

    status: Literal["failed"] = "failed"
    code: str | int | None = None
    message: str | None = None
    reason: str | None = None


TaskOutcome = Union[Pending, Succeeded, Failed]
