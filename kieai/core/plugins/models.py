"""Data models describing capability plugins."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from kieai.config import SDKConfig
from kieai.core.http.client import HttpClient


class DependencySpec(BaseModel):
    """A plugin's requirement on another plugin.

    ``version`` is reserved for semantic-version constraints; it is recorded
    but not checked yet.
    """

    name: str
    version: str | None = None
    optional: bool = False


class PluginMetadata(BaseModel):
    """Descriptive information about a plugin."""

    name: str
    version: str = "1.0.0"
    description: str = ""
    author: str = ""
    docs: str = ""
    tags: list[str] = []


class PluginContext(BaseModel):
    """Shared handles passed to plugin hooks and factories.

    ``registry`` is the client's :class:`~kieai.core.plugins.registry.PluginRegistry`.
    """

    config: SDKConfig
    client: HttpClient
    registry: Any

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)


class Plugin(BaseModel):
    """A named capability attached to a :class:`~kieai.core.sdk.KieAI` client.

    Attributes:
        name: Unique key in the registry.
        version: Plugin version string.
        factory: Builds the plugin's runtime API from a :class:`PluginContext`.
        dependencies: Plugins that must be registered first.
        on_init: Synchronous hook run before the factory; must not return an
            awaitable.
        on_dispose: Teardown hook; may return an awaitable.
        meta: Optional descriptive metadata.
    """

    name: str = Field(min_length=1)
    version: str = "1.0.0"
    factory: Callable[[PluginContext], Any]
    dependencies: list[DependencySpec] = []
    on_init: Callable[[PluginContext], Any] | None = None
    on_dispose: Callable[[], Any] | None = None
    meta: PluginMetadata | None = None

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)
