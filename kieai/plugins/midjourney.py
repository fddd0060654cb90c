"""Midjourney image generation plugin.

Text-to-image and image-to-image share the ``/generate`` endpoint and are
told apart by ``taskType``; upscale and vary act on an earlier task's grid.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal

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

PLUGIN_NAME = "midjourney"

BASE_PATH = "/api/v1/mj"

TEXT_TO_IMAGE = "mj_txt2img"
IMAGE_TO_IMAGE = "mj_img2img"

AspectRatio = Literal[
    "1:2", "9:16", "2:3", "3:4", "5:6", "6:5", "4:3", "3:2", "1:1", "16:9", "2:1"
]
Version = Literal["7", "6.1", "6", "5.2", "5.1", "niji6"]


class MidjourneyTextToImageOptions(OptionsModel):
    task_type: Literal["mj_txt2img"] = Field(default=TEXT_TO_IMAGE, alias="taskType")
    prompt: str = Field(min_length=1)
    speed: Literal["relaxed", "fast", "turbo"] | None = None
    aspect_ratio: AspectRatio | None = Field(default=None, alias="aspectRatio")
    version: Version | None = None
    variety: int | None = Field(default=None, ge=0, multiple_of=5)
    stylization: int | None = Field(default=None, ge=0, le=1000)
    weirdness: int | None = Field(default=None, ge=0, le=3000)
    watermark: str | None = None
    enable_translation: bool | None = Field(default=None, alias="enableTranslation")


class MidjourneyImageToImageOptions(MidjourneyTextToImageOptions):
    task_type: Literal["mj_img2img"] = Field(default=IMAGE_TO_IMAGE, alias="taskType")
    file_urls: list[Annotated[str, Field(pattern=URL_PATTERN)]] = Field(
        alias="fileUrls", min_length=1
    )


class MidjourneyGridOptions(OptionsModel):
    """Upscale / vary one image of a finished 2x2 grid."""

    task_id: str = Field(alias="taskId", min_length=1)
    image_index: int = Field(alias="imageIndex", ge=1, le=4)
    water_mark: str | None = Field(default=None, alias="waterMark")


class MidjourneyAPI:
    """Runtime API of the ``midjourney`` plugin."""

    def __init__(self, client: HttpClient) -> None:
        self.tasks = FlagTaskModule(
            client,
            generate_path=f"{BASE_PATH}/generate",
            record_path=f"{BASE_PATH}/record-info",
            input_model=MidjourneyTextToImageOptions,
            result_field="resultInfoJson",
            max_wait_time=IMAGE_MAX_WAIT_TIME,
            poll_interval=IMAGE_POLL_INTERVAL,
        )

    async def text_to_image(
        self, options: Mapping[str, Any], callback_url: str | None = None
    ) -> CreateTaskResponse:
        return await self.tasks.create_task(options, callback_url)

    async def image_to_image(
        self, options: Mapping[str, Any], callback_url: str | None = None
    ) -> CreateTaskResponse:
        return await self.tasks.create_task(
            options, callback_url, input_model=MidjourneyImageToImageOptions
        )

    async def upscale(
        self, options: Mapping[str, Any], callback_url: str | None = None
    ) -> CreateTaskResponse:
        return await self.tasks.create_task(
            options,
            callback_url,
            path=f"{BASE_PATH}/generateUpscale",
            input_model=MidjourneyGridOptions,
        )

    async def vary(
        self, options: Mapping[str, Any], callback_url: str | None = None
    ) -> CreateTaskResponse:
        return await self.tasks.create_task(
            options,
            callback_url,
            path=f"{BASE_PATH}/generateVary",
            input_model=MidjourneyGridOptions,
        )

    async def get_task_record(self, task_id: str) -> FlagTaskRecord:
        return await self.tasks.get_task_record(task_id)

    async def wait_for_completion(self, task_id: str, **kwargs: Any) -> Any:
        return await self.tasks.wait_for_completion(task_id, **kwargs)

    async def verify_callback(self, payload: Any) -> FlagTaskRecord:
        return await self.tasks.verify_callback(payload)


MidjourneyPlugin = Plugin(
    name=PLUGIN_NAME,
    version="1.0.0",
    meta=PluginMetadata(
        name=PLUGIN_NAME,
        description="Midjourney image generation, upscaling and variations",
        author="KieAI",
        tags=["image"],
    ),
    on_init=require_api_key("Midjourney"),
    factory=lambda ctx: MidjourneyAPI(ctx.client),
)
