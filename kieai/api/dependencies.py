"""FastAPI dependency functions.

The SDK and the optional task handler are stored on ``app.state`` by
:func:`kieai.api.create_callback_app` and looked up here.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from fastapi import Request

from kieai.core.sdk import KieAI

TaskHandler = Callable[[str, Any], Any]


def get_sdk(request: Request) -> KieAI:
    return request.app.state.sdk


def get_task_handler(request: Request) -> TaskHandler | None:
    return request.app.state.on_task
