"""Kling V2.1 video generation plugin.

Four model variants share the jobs protocol: master text-to-video, master
image-to-video, standard image-to-video and pro image-to-video (with an
optional tail frame).
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Literal

from pydantic import Field

from kieai.core.http.client import HttpClient
from kieai.core.plugins.models import Plugin, PluginMetadata
from kieai.core.tasks.jobs import JobsModule
from kieai.core.tasks.models import CreateTaskResponse
from kieai.plugins.base import (
    URL_PATTERN,
    VIDEO_MAX_WAIT_TIME,
    VIDEO_POLL_INTERVAL,
    JobsCapability,
    OptionsModel,
    require_api_key,
)

PLUGIN_NAME = "kling-v2-1"


class KlingV21Model(str, Enum):
    MASTER_TEXT_TO_VIDEO = "kling/v2-1-master-text-to-video"
    MASTER_IMAGE_TO_VIDEO = "kling/v2-1-master-image-to-video"
    STANDARD = "kling/v2-1-standard"
    PRO = "kling/v2-1-pro"


class _KlingVideoOptions(OptionsModel):
    prompt: str = Field(min_length=1, max_length=5000)
    duration: Literal["5", "10"] | None = None
    negative_prompt: str | None = Field(default=None, max_length=500)
    cfg_scale: float | None = Field(default=None, ge=0, le=1)


class KlingTextToVideoOptions(_KlingVideoOptions):
    aspect_ratio: Literal["16:9", "9:16", "1:1"] | None = None


class KlingImageToVideoOptions(_KlingVideoOptions):
    image_url: str = Field(pattern=URL_PATTERN)


class KlingProOptions(KlingImageToVideoOptions):
    tail_image_url: str | None = Field(default=None, pattern=URL_PATTERN)


class KlingV21API(JobsCapability):
    """Runtime API of the ``kling-v2-1`` plugin."""

    def __init__(
        self,
        client: HttpClient,
        *,
        callback_fallback: KlingV21Model | None = KlingV21Model.MASTER_TEXT_TO_VIDEO,
    ) -> None:
        def module(model: KlingV21Model, schema: type[OptionsModel]) -> JobsModule:
            return JobsModule(
                model,
                client,
                input_model=schema,
                max_wait_time=VIDEO_MAX_WAIT_TIME,
                poll_interval=VIDEO_POLL_INTERVAL,
            )

        super().__init__(
            {
                KlingV21Model.MASTER_TEXT_TO_VIDEO: module(
                    KlingV21Model.MASTER_TEXT_TO_VIDEO, KlingTextToVideoOptions
                ),
                KlingV21Model.MASTER_IMAGE_TO_VIDEO: module(
                    KlingV21Model.MASTER_IMAGE_TO_VIDEO, KlingImageToVideoOptions
                ),
                KlingV21Model.STANDARD: module(KlingV21Model.STANDARD, KlingImageToVideoOptions),
                KlingV21Model.PRO: module(KlingV21Model.PRO, KlingProOptions),
            },
            callback_fallback=callback_fallback,
        )

    async def master_text_to_video(
        self, options: Mapping[str, Any], callback_url: str | None = None
    ) -> CreateTaskResponse:
        return await self.variant(KlingV21Model.MASTER_TEXT_TO_VIDEO).create_task(
            options, callback_url
        )

    async def master_image_to_video(
        self, options: Mapping[str, Any], callback_url: str | None = None
    ) -> CreateTaskResponse:
        return await self.variant(KlingV21Model.MASTER_IMAGE_TO_VIDEO).create_task(
            options, callback_url
        )

    async def standard_image_to_video(
        self, options: Mapping[str, Any], callback_url: str | None = None
    ) -> CreateTaskResponse:
        return await self.variant(KlingV21Model.STANDARD).create_task(options, callback_url)

    async def pro_image_to_video(
        self, options: Mapping[str, Any], callback_url: str | None = None
    ) -> CreateTaskResponse:
        return await self.variant(KlingV21Model.PRO).create_task(options, callback_url)


def create_kling_v21_plugin(
    *,
    callback_fallback: KlingV21Model | None = KlingV21Model.MASTER_TEXT_TO_VIDEO,
) -> Plugin:
    """Build the plugin descriptor.

    Callbacks naming an unknown model are served by *callback_fallback*;
    pass ``None`` to reject them with ``UnknownModelError`` instead.
    """
    return Plugin(
        name=PLUGIN_NAME,
        version="1.0.0",
        meta=PluginMetadata(
            name=PLUGIN_NAME,
            description="Kling AI V2.1 video generation plugin",
            author="KieAI",
            docs="https://kie.ai/kling/v2-1",
            tags=["video"],
        ),
        on_init=require_api_key("Kling V2.1"),
        factory=lambda ctx: KlingV21API(ctx.client, callback_fallback=callback_fallback),
    )


KlingV21Plugin = create_kling_v21_plugin()
