"""Name-keyed store of live plugin instances."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any


class PluginRegistry:
    """Map from plugin name to the API object its factory produced.

    The registry is a plain store; uniqueness and dependency rules are
    enforced by :meth:`kieai.core.sdk.KieAI.use`.  Registering the same
    name from concurrent call sites is not guarded, so register plugins
    once at startup.
    """

    def __init__(self) -> None:
        self._modules: dict[str, Any] = {}

    def has(self, name: str) -> bool:
        return name in self._modules

    def set(self, name: str, instance: Any) -> None:
        self._modules[name] = instance

    def get(self, name: str) -> Any | None:
        return self._modules.get(name)

    def remove(self, name: str) -> None:
        self._modules.pop(name, None)

    def keys(self) -> list[str]:
        return list(self._modules)

    def clear(self) -> None:
        self._modules.clear()

    def __len__(self) -> int:
        return len(self._modules)

    def __contains__(self, name: object) -> bool:
        return name in self._modules

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._modules))
