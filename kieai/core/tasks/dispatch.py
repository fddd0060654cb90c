"""Route webhook callbacks to the model variant that produced the task."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from kieai.core.tasks.base import BaseTaskModule, extract_callback_task_id
from kieai.utils.exceptions import UnknownModelError
from kieai.utils.logging import get_logger

logger = get_logger(__name__)


def _key(model: Any) -> str:
    return model.value if isinstance(model, Enum) else str(model)


class CallbackDispatcher:
    """Pick a variant by the ``data.model`` discriminator of a callback.

    Parameters
    ----------
    variants:
        Model identifier -> module serving that model.
    fallback:
        Identifier of the variant used when the discriminator is missing or
        unrecognised.  ``None`` makes such callbacks fail with
        :class:`UnknownModelError`.
    """

    def __init__(
        self,
        variants: Mapping[Any, BaseTaskModule],
        *,
        fallback: Any | None = None,
    ) -> None:
        self._variants: dict[str, BaseTaskModule] = {
            _key(model): module for model, module in variants.items()
        }
        self.fallback = _key(fallback) if fallback is not None else None
        if self.fallback is not None and self.fallback not in self._variants:
            raise ValueError(f"Fallback {self.fallback!r} is not one of the variants")

    @property
    def models(self) -> list[str]:
        return list(self._variants)

    def resolve(self, payload: Any) -> BaseTaskModule:
        """Return the module for *payload*; the envelope must carry a task id."""
        extract_callback_task_id(payload)
        model = payload["data"].get("model")

        module = self._variants.get(model) if isinstance(model, str) else None
        if module is not None:
            return module

        if self.fallback is None:
            raise UnknownModelError(model, self.models)

        logger.warning(
            "callback_model_fallback",
            model=model,
            fallback=self.fallback,
            task_id=payload["data"].get("taskId"),
        )
        return self._variants[self.fallback]

    async def verify_callback(self, payload: Any) -> Any:
        return await self.resolve(payload).verify_callback(payload)
