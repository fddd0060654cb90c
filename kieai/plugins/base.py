"""Building blocks shared by the built-in capability plugins."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from kieai.core.plugins.models import PluginContext
from kieai.core.tasks.dispatch import CallbackDispatcher
from kieai.core.tasks.jobs import JobsModule
from kieai.core.tasks.models import JobRecord
from kieai.utils.exceptions import ConfigInvalidError
from kieai.utils.logging import get_logger

logger = get_logger(__name__)

# Polling defaults in seconds.  Video generation takes minutes, image
# generation seconds.
VIDEO_MAX_WAIT_TIME = 600.0
VIDEO_POLL_INTERVAL = 30.0
IMAGE_MAX_WAIT_TIME = 300.0
IMAGE_POLL_INTERVAL = 3.0

URL_PATTERN = r"^https?://"


class OptionsModel(BaseModel):
    """Base for capability option schemas: unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


def require_api_key(label: str) -> Callable[[PluginContext], None]:
    """Build an ``on_init`` hook that refuses to run without an API key."""

    def on_init(ctx: PluginContext) -> None:
        if not ctx.config.api_key:
            raise ConfigInvalidError(f"{label} plugin requires API key")
        logger.debug("plugin_initialized", plugin=label)

    return on_init


class JobsCapability:
    """Plugin API composed of several :class:`JobsModule` variants.

    All variants share one record endpoint, so lookups and polling go
    through the first variant; callbacks are routed by model discriminator.
    """

    def __init__(
        self,
        variants: Mapping[Enum, JobsModule],
        *,
        callback_fallback: Enum | None = None,
    ) -> None:
        self.variants: dict[Enum, JobsModule] = dict(variants)
        self.callbacks = CallbackDispatcher(self.variants, fallback=callback_fallback)
        self._primary = next(iter(self.variants.values()))

    def variant(self, model: Enum) -> JobsModule:
        return self.variants[model]

    async def get_task_record(self, task_id: str) -> JobRecord:
        return await self._primary.get_task_record(task_id)

    async def wait_for_completion(self, task_id: str, **kwargs: Any) -> Any:
        return await self._primary.wait_for_completion(task_id, **kwargs)

    async def verify_callback(self, payload: Any) -> JobRecord:
        return await self.callbacks.verify_callback(payload)
