"""Flux Kontext image generation and editing plugin."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import Field

from kieai.core.http.client import HttpClient
from kieai.core.plugins.models import Plugin, PluginMetadata
from kieai.core.tasks.flagged import FlagTaskModule
from kieai.core.tasks.models import CreateTaskResponse, FlagTaskRecord
from kieai.plugins.base import (
    IMAGE_MAX_WAIT_TIME,
    IMAGE_POLL_INTERVAL,
    URL_PATTERN,
    OptionsModel,
    require_api_key,
)

PLUGIN_NAME = "flux-kontext"

BASE_PATH = "/api/v1/flux/kontext"

AspectRatio = Literal["1:1", "16:9", "9:16", "4:3", "3:4", "21:9", "16:21"]


class FluxGenerateOptions(OptionsModel):
    prompt: str = Field(min_length=1)
    aspect_ratio: AspectRatio | None = Field(default=None, alias="aspectRatio")
    model: Literal["flux-kontext-pro", "flux-kontext-max"] | None = None
    output_format: Literal["jpeg", "png"] | None = Field(default=None, alias="outputFormat")
    input_image: str | None = Field(default=None, alias="inputImage", pattern=URL_PATTERN)
    enable_translation: bool | None = Field(default=None, alias="enableTranslation")
    prompt_upsampling: bool | None = Field(default=None, alias="promptUpsampling")
    safety_tolerance: int | None = Field(default=None, alias="safetyTolerance", ge=0, le=6)
    upload_cn: bool | None = Field(default=None, alias="uploadCn")
    watermark: str | None = None


class FluxEditOptions(FluxGenerateOptions):
    input_image: str = Field(alias="inputImage", pattern=URL_PATTERN)
    safety_tolerance: int | None = Field(default=None, alias="safetyTolerance", ge=0, le=2)


class FluxKontextAPI:
    """Runtime API of the ``flux-kontext`` plugin."""

    def __init__(self, client: HttpClient) -> None:
        self.tasks = FlagTaskModule(
            client,
            generate_path=f"{BASE_PATH}/generate",
            record_path=f"{BASE_PATH}/record-info",
            input_model=FluxGenerateOptions,
            result_field="response",
            max_wait_time=IMAGE_MAX_WAIT_TIME,
            poll_interval=IMAGE_POLL_INTERVAL,
        )

    async def generate_image(
        self, options: Mapping[str, Any], callback_url: str | None = None
    ) -> CreateTaskResponse:
        return await self.tasks.create_task(options, callback_url)

    async def edit_image(
        self, options: Mapping[str, Any], callback_url: str | None = None
    ) -> CreateTaskResponse:
        return await self.tasks.create_task(options, callback_url, input_model=FluxEditOptions)

    async def get_task_record(self, task_id: str) -> FlagTaskRecord:
        return await self.tasks.get_task_record(task_id)

    async def wait_for_completion(self, task_id: str, **kwargs: Any) -> Any:
        return await self.tasks.wait_for_completion(task_id, **kwargs)

    async def verify_callback(self, payload: Any) -> FlagTaskRecord:
        return await self.tasks.verify_callback(payload)


FluxKontextPlugin = Plugin(
    name=PLUGIN_NAME,
    version="1.0.0",
    meta=PluginMetadata(
        name=PLUGIN_NAME,
        description="Flux Kontext image generation and editing",
        author="KieAI",
        tags=["image"],
    ),
    on_init=require_api_key("Flux Kontext"),
    factory=lambda ctx: FluxKontextAPI(ctx.client),
)
