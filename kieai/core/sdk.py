"""KieAI client: shared configuration, HTTP transport and plugin composition.

Typical lifecycle::

    async with KieAI({"api_key": "..."}) as sdk:
        sdk.use(KlingV21Plugin)
        kling = sdk.get("kling-v2-1")
        task = await kling.pro_image_to_video({...})
        result = await kling.wait_for_completion(task.task_id)
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Iterable, Mapping
from typing import Any

import httpx

from kieai.config import SDKConfig, normalize_config
from kieai.core.http.client import HttpClient
from kieai.core.plugins.models import Plugin, PluginContext
from kieai.core.plugins.registry import PluginRegistry
from kieai.utils.exceptions import (
    DependencyMissingError,
    KieAIError,
    PluginDuplicateError,
    PluginNotRegisteredError,
    UnknownError,
    ValidationError,
)
from kieai.utils.logging import get_logger

logger = get_logger(__name__)


class KieAI:
    """Entry point of the SDK.

    Parameters
    ----------
    config:
        :class:`SDKConfig`, a mapping with the same fields, or ``None`` to
        read ``KIEAI_*`` settings from the environment.
    transport:
        Optional ``httpx`` transport forwarded to the :class:`HttpClient`.
    """

    def __init__(
        self,
        config: SDKConfig | Mapping[str, Any] | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = normalize_config(config)
        self.client = HttpClient(self._config, transport=transport)
        self.registry = PluginRegistry()
        self._plugins: dict[str, Plugin] = {}

    @property
    def config(self) -> SDKConfig:
        return self._config

    # ------------------------------------------------------------------
    # Registration & lookup
    # ------------------------------------------------------------------

    def use(self, plugin: Plugin) -> KieAI:
        """Register *plugin* and return ``self`` for chaining.

        Raises :class:`PluginDuplicateError` when the name is taken and
        :class:`DependencyMissingError` when a required dependency has not
        been registered yet.  A failing ``on_init`` or factory leaves no
        trace in the registry.
        """
        name = plugin.name
        if self.registry.has(name):
            raise PluginDuplicateError(name)

        self._validate_dependencies(plugin)

        ctx = PluginContext(config=self._config, client=self.client, registry=self.registry)

        try:
            if plugin.on_init is not None:
                result = plugin.on_init(ctx)
                if inspect.isawaitable(result):
                    if inspect.iscoroutine(result):
                        result.close()
                    raise ValidationError(
                        f'Plugin "{name}" on_init hook returned an awaitable. '
                        "Async initialization is not supported.",
                        hint="Use synchronous initialization or move async setup into the plugin API",
                        context={"plugin_name": name, "hook": "on_init"},
                    )

            instance = plugin.factory(ctx)
            self.registry.set(name, instance)
            self._plugins[name] = plugin
        except Exception:
            self.registry.remove(name)
            self._plugins.pop(name, None)
            logger.error("plugin_registration_failed", plugin=name)
            raise

        logger.info("plugin_registered", plugin=name, version=plugin.version)
        return self

    def use_many(self, plugins: Iterable[Plugin]) -> KieAI:
        """Register *plugins* in order; callers supply dependency order."""
        for plugin in plugins:
            self.use(plugin)
        return self

    def get(self, name: str) -> Any:
        """Return the API registered under *name*.

        Raises :class:`PluginNotRegisteredError` if no such plugin exists.
        """
        if not self.registry.has(name):
            raise PluginNotRegisteredError(name)
        return self.registry.get(name)

    def has(self, name: str) -> bool:
        return self.registry.has(name)

    def registered_plugins(self) -> list[str]:
        return self.registry.keys()

    def plugin_metadata(self, name: str) -> Plugin | None:
        return self._plugins.get(name)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def dispose(self) -> None:
        """Run every plugin's teardown hook, then clear the registry.

        Deferred teardowns are awaited concurrently.  A failing hook does
        not stop the others; the registry is cleared and the HTTP client
        closed regardless, then the first failure is raised (wrapped in
        :class:`UnknownError` unless it already is a :class:`KieAIError`).
        """
        names: list[str] = []
        pending = []
        errors: list[tuple[str, BaseException]] = []
        for name in self.registry.keys():
            plugin = self._plugins.get(name)
            if plugin is None or plugin.on_dispose is None:
                continue
            try:
                result = plugin.on_dispose()
            except Exception as exc:
                errors.append((name, exc))
                continue
            if inspect.isawaitable(result):
                names.append(name)
                pending.append(result)

        count = len(self.registry)
        try:
            if pending:
                results = await asyncio.gather(*pending, return_exceptions=True)
                for name, result in zip(names, results):
                    if isinstance(result, Exception):
                        errors.append((name, result))
                    elif isinstance(result, BaseException):
                        raise result
        finally:
            self.registry.clear()
            self._plugins.clear()
            await self.client.aclose()

        for name, exc in errors:
            logger.error("plugin_dispose_failed", plugin=name, error=str(exc))
        logger.info("sdk_disposed", plugins=count, failures=len(errors))

        if errors:
            name, first = errors[0]
            if isinstance(first, KieAIError):
                raise first
            raise UnknownError(
                f'Plugin "{name}" teardown failed: {first}',
                context={"plugin_name": name, "failures": [n for n, _ in errors]},
            ) from first

    async def __aenter__(self) -> KieAI:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.dispose()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _validate_dependencies(self, plugin: Plugin) -> None:
        for dep in plugin.dependencies:
            if self.registry.has(dep.name):
                if dep.version is not None:
                    # Version constraints are recorded but not enforced.
                    logger.debug(
                        "dependency_version_unchecked",
                        plugin=plugin.name,
                        dependency=dep.name,
                        constraint=dep.version,
                    )
                continue
            if dep.optional:
                continue
            raise DependencyMissingError(plugin.name, dep.name)

    def __repr__(self) -> str:
        return f"KieAI(base_url={self._config.base_url!r}, plugins={self.registered_plugins()!r})"
