"""KieAI SDK -- typed async client for the KieAI generative-media API.

Public API::

    from kieai import KieAI
    from kieai.plugins import KlingV21Plugin

    async with KieAI({"api_key": "..."}) as sdk:
        kling = sdk.use(KlingV21Plugin).get("kling-v2-1")
"""

from kieai.config import RetryConfig, SDKConfig, normalize_config
from kieai.core.plugins.models import DependencySpec, Plugin, PluginContext, PluginMetadata
from kieai.core.sdk import KieAI
from kieai.core.tasks.flagged import FlagTaskModule
from kieai.core.tasks.jobs import JobsModule
from kieai.core.tasks.models import (
    CreateTaskResponse,
    Failed,
    FlagTaskRecord,
    JobRecord,
    Pending,
    Succeeded,
    SuccessFlag,
    TaskOutcome,
    TaskState,
)
from kieai.utils.exceptions import (
    ConfigInvalidError,
    DependencyMissingError,
    DependencyVersionMismatchError,
    ErrorKind,
    HttpFailureError,
    KieAIError,
    NetworkError,
    PluginDuplicateError,
    PluginNotRegisteredError,
    TaskFailedError,
    TimeoutError,
    UnknownError,
    UnknownModelError,
    ValidationError,
)

__version__ = "1.0.0"

__all__ = [
    # Client
    "KieAI",
    "SDKConfig",
    "RetryConfig",
    "normalize_config",
    # Plugins
    "Plugin",
    "PluginContext",
    "PluginMetadata",
    "DependencySpec",
    # Tasks
    "JobsModule",
    "FlagTaskModule",
    "CreateTaskResponse",
    "JobRecord",
    "FlagTaskRecord",
    "TaskState",
    "SuccessFlag",
    "TaskOutcome",
    "Pending",
    "Succeeded",
    "Failed",
    # Errors
    "ErrorKind",
    "KieAIError",
    "ConfigInvalidError",
    "HttpFailureError",
    "PluginNotRegisteredError",
    "PluginDuplicateError",
    "DependencyMissingError",
    "DependencyVersionMismatchError",
    "ValidationError",
    "TimeoutError",
    "NetworkError",
    "UnknownError",
    "TaskFailedError",
    "UnknownModelError",
]
