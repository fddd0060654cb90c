"""Response schemas of the callback receiver."""

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    error: str
    kind: str
    detail: str = ""


class CallbackAck(BaseModel):
    """Acknowledgement of a verified callback."""

    task_id: str = Field(alias="taskId")
    state: str

    model_config = ConfigDict(populate_by_name=True)


class HealthResponse(BaseModel):
    status: str
    plugins: list[str]
