"""Error taxonomy shared by every layer of the SDK.

All failures that cross a module boundary are instances of
:class:`KieAIError`.  Each carries a :class:`ErrorKind`, a human message,
an optional remediation ``hint`` and a structured ``context`` dict; the
underlying cause is chained through ``__cause__`` (``raise ... from exc``).
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Closed set of failure kinds."""

    CONFIG_INVALID = "ConfigInvalid"
    HTTP_FAILURE = "HttpFailure"
    PLUGIN_NOT_REGISTERED = "PluginNotRegistered"
    PLUGIN_DUPLICATE = "PluginDuplicate"
    DEPENDENCY_MISSING = "DependencyMissing"
    DEPENDENCY_VERSION_MISMATCH = "DependencyVersionMismatch"
    VALIDATION_ERROR = "ValidationError"
    TIMEOUT_ERROR = "TimeoutError"
    NETWORK_ERROR = "NetworkError"
    UNKNOWN_ERROR = "UnknownError"
    TASK_FAILED = "TaskFailed"
    UNKNOWN_MODEL = "UnknownModel"


_PLUGIN_KINDS = frozenset(
    {
        ErrorKind.PLUGIN_NOT_REGISTERED,
        ErrorKind.PLUGIN_DUPLICATE,
        ErrorKind.DEPENDENCY_MISSING,
        ErrorKind.DEPENDENCY_VERSION_MISMATCH,
    }
)

_NETWORK_KINDS = frozenset(
    {
        ErrorKind.HTTP_FAILURE,
        ErrorKind.TIMEOUT_ERROR,
        ErrorKind.NETWORK_ERROR,
    }
)

_TASK_KINDS = frozenset({ErrorKind.TASK_FAILED, ErrorKind.UNKNOWN_MODEL})


class KieAIError(Exception):
    """Base exception for the KieAI SDK."""

    kind: ErrorKind = ErrorKind.UNKNOWN_ERROR

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        self.message = message
        self.hint = hint
        self.context = context or {}
        super().__init__(message)

    @property
    def cause(self) -> BaseException | None:
        return self.__cause__

    def is_config_error(self) -> bool:
        return self.kind is ErrorKind.CONFIG_INVALID

    def is_plugin_error(self) -> bool:
        return self.kind in _PLUGIN_KINDS

    def is_network_error(self) -> bool:
        return self.kind in _NETWORK_KINDS

    def is_task_error(self) -> bool:
        return self.kind in _TASK_KINDS

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly view of the error."""
        cause = self.__cause__
        return {
            "name": type(self).__name__,
            "kind": self.kind.value,
            "message": self.message,
            "hint": self.hint,
            "context": self.context,
            "cause": (
                {"name": type(cause).__name__, "message": str(cause)}
                if cause is not None
                else None
            ),
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class ConfigInvalidError(KieAIError):
    kind = ErrorKind.CONFIG_INVALID


class HttpFailureError(KieAIError):
    kind = ErrorKind.HTTP_FAILURE


class PluginNotRegisteredError(KieAIError):
    kind = ErrorKind.PLUGIN_NOT_REGISTERED

    def __init__(self, plugin_name: str, hint: str | None = None):
        self.plugin_name = plugin_name
        super().__init__(
            f'Plugin "{plugin_name}" is not registered',
            hint=hint or "Call sdk.use(...) to register the plugin first",
            context={"plugin_name": plugin_name},
        )


class PluginDuplicateError(KieAIError):
    kind = ErrorKind.PLUGIN_DUPLICATE

    def __init__(self, plugin_name: str):
        self.plugin_name = plugin_name
        super().__init__(
            f'Plugin "{plugin_name}" is already registered',
            context={"plugin_name": plugin_name},
        )


class DependencyMissingError(KieAIError):
    kind = ErrorKind.DEPENDENCY_MISSING

    def __init__(self, plugin_name: str, dependency: str, hint: str | None = None):
        self.plugin_name = plugin_name
        self.dependency = dependency
        super().__init__(
            f'Plugin "{plugin_name}" requires "{dependency}" to be registered first',
            hint=hint or f'Register the dependency plugin before registering "{plugin_name}"',
            context={"plugin_name": plugin_name, "dependency": dependency},
        )


class DependencyVersionMismatchError(KieAIError):
    kind = ErrorKind.DEPENDENCY_VERSION_MISMATCH


class ValidationError(KieAIError):
    kind = ErrorKind.VALIDATION_ERROR


class TimeoutError(KieAIError):
    kind = ErrorKind.TIMEOUT_ERROR


class NetworkError(KieAIError):
    kind = ErrorKind.NETWORK_ERROR


class UnknownError(KieAIError):
    kind = ErrorKind.UNKNOWN_ERROR


class TaskFailedError(KieAIError):
    """A task reached its terminal failure state on the server."""

    kind = ErrorKind.TASK_FAILED

    def __init__(
        self,
        task_id: str,
        fail_code: str | int | None,
        fail_msg: str | None,
        context: dict[str, Any] | None = None,
    ):
        self.task_id = task_id
        self.fail_code = fail_code
        self.fail_msg = fail_msg
        super().__init__(
            f"Task {task_id} failed: {fail_msg or 'no message'} (code: {fail_code})",
            context={
                "task_id": task_id,
                "fail_code": fail_code,
                "fail_msg": fail_msg,
                **(context or {}),
            },
        )


class UnknownModelError(KieAIError):
    kind = ErrorKind.UNKNOWN_MODEL

    def __init__(self, model: object, known: list[str]):
        self.model = model
        super().__init__(
            f"Callback names an unrecognised model: {model!r}",
            hint="Configure a fallback variant or route the callback to the matching plugin",
            context={"model": model, "known_models": known},
        )
