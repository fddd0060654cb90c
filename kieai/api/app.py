from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from kieai.api.dependencies import TaskHandler
from kieai.api.endpoints import callbacks, health
from kieai.api.middleware.error_handler import ErrorHandlerMiddleware
from kieai.api.middleware.logging_middleware import LoggingMiddleware
from kieai.config import settings
from kieai.core.sdk import KieAI
from kieai.utils.logging import get_logger, setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(debug=settings.debug, json_logs=settings.log_json)
    logger = get_logger("startup")
    logger.info("callback_receiver_started", plugins=app.state.sdk.registered_plugins())

    yield

    logger.info("callback_receiver_stopped")


def create_callback_app(sdk: KieAI, on_task: TaskHandler | None = None) -> FastAPI:
    """Build an app that verifies callbacks against *sdk*'s plugins.

    *on_task* receives ``(plugin_name, record)`` for every verified
    callback; it may be sync or async.  The caller owns *sdk* and
    disposes it.
    """
    app = FastAPI(
        title="KieAI callback receiver",
        description="Verifies task-completion webhooks against the KieAI API",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.sdk = sdk
    app.state.on_task = on_task

    # The last middleware added is the outermost.
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(LoggingMiddleware)

    app.include_router(health.router, tags=["health"])
    app.include_router(callbacks.router, tags=["callbacks"])
    return app
