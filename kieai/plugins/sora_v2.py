"""Sora 2 / Sora 2 Pro video generation plugin."""

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
    URL_PATTERN,
    VIDEO_MAX_WAIT_TIME,
    VIDEO_POLL_INTERVAL,
    JobsCapability,
    OptionsModel,
    require_api_key,
)
from kieai.utils.exceptions import ValidationError

PLUGIN_NAME = "sora-v2"

Mode = Literal["standard", "pro"]


class SoraV2Model(str, Enum):
    TEXT_TO_VIDEO = "sora-2-text-to-video"
    PRO_TEXT_TO_VIDEO = "sora-2-pro-text-to-video"
    IMAGE_TO_VIDEO = "sora-2-image-to-video"
    PRO_IMAGE_TO_VIDEO = "sora-2-pro-image-to-video"


_MODEL_BY_MODE: dict[tuple[str, str], SoraV2Model] = {
    ("text", "standard"): SoraV2Model.TEXT_TO_VIDEO,
    ("text", "pro"): SoraV2Model.PRO_TEXT_TO_VIDEO,
    ("image", "standard"): SoraV2Model.IMAGE_TO_VIDEO,
    ("image", "pro"): SoraV2Model.PRO_IMAGE_TO_VIDEO,
}


class SoraTextToVideoOptions(OptionsModel):
    prompt: str = Field(min_length=1, max_length=10000)
    aspect_ratio: Literal["portrait", "landscape"] | None = None
    n_frames: Literal["10", "15"] | None = None
    size: Literal["standard", "high"] | None = None
    remove_watermark: bool | None = None


class SoraImageToVideoOptions(SoraTextToVideoOptions):
    image_urls: list[Annotated[str, Field(pattern=URL_PATTERN)]] = Field(min_length=1)


class SoraV2API(JobsCapability):
    """Runtime API of the ``sora-v2`` plugin.

    ``mode`` picks between the standard and pro model of each flavour.
    """

    def __init__(self, client: HttpClient) -> None:
        super().__init__(
            {
                model: JobsModule(
                    model,
                    client,
                    input_model=(
                        SoraImageToVideoOptions
                        if kind == "image"
                        else SoraTextToVideoOptions
                    ),
                    max_wait_time=VIDEO_MAX_WAIT_TIME,
                    poll_interval=VIDEO_POLL_INTERVAL,
                )
                for (kind, _mode), model in _MODEL_BY_MODE.items()
            },
            callback_fallback=SoraV2Model.TEXT_TO_VIDEO,
        )

    async def text_to_video(
        self,
        options: Mapping[str, Any],
        callback_url: str | None = None,
        *,
        mode: Mode = "standard",
    ) -> CreateTaskResponse:
        return await self.variant(_model_for("text", mode)).create_task(options, callback_url)

    async def image_to_video(
        self,
        options: Mapping[str, Any],
        callback_url: str | None = None,
        *,
        mode: Mode = "standard",
    ) -> CreateTaskResponse:
        return await self.variant(_model_for("image", mode)).create_task(options, callback_url)


def _model_for(kind: str, mode: str) -> SoraV2Model:
    try:
        return _MODEL_BY_MODE[(kind, mode)]
    except KeyError:
        raise ValidationError(
            'mode must be either "standard" or "pro"',
            context={"field": "mode", "value": mode, "valid_values": ["standard", "pro"]},
        ) from None


SoraV2Plugin = Plugin(
    name=PLUGIN_NAME,
    version="1.0.0",
    meta=PluginMetadata(
        name=PLUGIN_NAME,
        description="OpenAI Sora 2 and Sora 2 Pro video generation plugin",
        author="KieAI",
        docs="https://kie.ai/sora-2",
        tags=["video"],
    ),
    on_init=require_api_key("Sora 2"),
    factory=lambda ctx: SoraV2API(ctx.client),
)
