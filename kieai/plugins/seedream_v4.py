"""Seedream V4 image generation plugin (text-to-image and edit)."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import Field

from kieai.core.http.client import HttpClient
from kieai.core.plugins.models import Plugin, PluginMetadata
from kieai.core.tasks.jobs import JobsModule
from kieai.core.tasks.models import CreateTaskResponse
from kieai.plugins.base import (
    IMAGE_MAX_WAIT_TIME,
    IMAGE_POLL_INTERVAL,
    URL_PATTERN,
    JobsCapability,
    OptionsModel,
    require_api_key,
)

PLUGIN_NAME = "seedream-v4"

ImageSize = Literal[
    "square",
    "square_hd",
    "portrait_4_3",
    "portrait_16_9",
    "landscape_4_3",
    "landscape_16_9",
]


class SeedreamV4Model(str, Enum):
    TEXT_TO_IMAGE = "bytedance/seedream-v4-text-to-image"
    EDIT = "bytedance/seedream-v4-edit"


class SeedreamTextToImageOptions(OptionsModel):
    prompt: str = Field(min_length=1, max_length=5000)
    image_size: ImageSize | None = None
    seed: int | None = None


class SeedreamEditOptions(SeedreamTextToImageOptions):
    image_urls: list[Annotated[str, Field(pattern=URL_PATTERN)]] = Field(min_length=1, max_length=10)


class SeedreamV4API(JobsCapability):
    """Runtime API of the ``seedream-v4`` plugin.

    Callbacks are strict: an unrecognised model raises ``UnknownModelError``.
    """

    def __init__(self, client: HttpClient) -> None:
        super().__init__(
            {
                SeedreamV4Model.TEXT_TO_IMAGE: JobsModule(
                    SeedreamV4Model.TEXT_TO_IMAGE,
                    client,
                    input_model=SeedreamTextToImageOptions,
                    max_wait_time=IMAGE_MAX_WAIT_TIME,
                    poll_interval=IMAGE_POLL_INTERVAL,
                ),
                SeedreamV4Model.EDIT: JobsModule(
                    SeedreamV4Model.EDIT,
                    client,
                    input_model=SeedreamEditOptions,
                    max_wait_time=IMAGE_MAX_WAIT_TIME,
                    poll_interval=IMAGE_POLL_INTERVAL,
                ),
            },
            callback_fallback=None,
        )

    async def text_to_image(
        self, options: Mapping[str, Any], callback_url: str | None = None
    ) -> CreateTaskResponse:
        return await self.variant(SeedreamV4Model.TEXT_TO_IMAGE).create_task(options, callback_url)

    async def edit(
        self, options: Mapping[str, Any], callback_url: str | None = None
    ) -> CreateTaskResponse:
        return await self.variant(SeedreamV4Model.EDIT).create_task(options, callback_url)


SeedreamV4Plugin = Plugin(
    name=PLUGIN_NAME,
    version="1.0.0",
    meta=PluginMetadata(
        name=PLUGIN_NAME,
        description="ByteDance Seedream V4 image generation and editing",
        author="KieAI",
        tags=["image"],
    ),
    on_init=require_api_key("Seedream V4"),
    factory=lambda ctx: SeedreamV4API(ctx.client),
)
