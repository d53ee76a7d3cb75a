from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from jinja2 import TemplateError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .context import AppContext
from .errors import TodoAppError
from .generation import TodoGenerator, get_generator
from .logging_config import RequestLogMiddleware
from .repositories import Repository, get_repository
from .routers import todos as todos_router
from .settings import Settings, get_settings

log = structlog.get_logger(__name__)

openapi_tags = [
    {"name": "todos", "description": "HTML todo list with add, delete and generate forms."},
]


async def todo_error_handler(request: Request, exc: TodoAppError) -> PlainTextResponse:
    """
    Answer a TodoAppError with its status code and message as plain text.
    """
    if exc.status_code >= 500:
        log.error("request_failed", error=exc.message, kind=type(exc).__name__)
    else:
        log.warning("request_rejected", error=exc.message)
    return PlainTextResponse(exc.message, status_code=exc.status_code)


async def template_error_handler(request: Request, exc: TemplateError) -> PlainTextResponse:
    log.error("render_failed", error=str(exc))
    return PlainTextResponse(f"failed to execute template: {exc}", status_code=500)


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[Settings] = None,
    *,
    repository: Optional[Repository] = None,
    generator: Optional[TodoGenerator] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Settings default to the environment (see settings.get_settings); the
    repository and generator default to the backends those settings select;
    without a region there is no generator and the Generate form is hidden.
    Tests pass their own.

    Raises:
        ConfigurationError: required settings are missing.
    """
    settings = settings or get_settings()
    context = AppContext(
        settings=settings,
        repository=repository or get_repository(settings),
        generator=generator or (get_generator(settings) if settings.generation_enabled else None),
    )

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        log.info(
            "server_starting",
            backend=settings.persistence_backend,
            table=settings.dynamodb_table,
            bedrock_model=context.generator.model_id if context.generator else None,
            url_prefix=settings.url_prefix,
        )
        if settings.motd:
            log.info("message_of_the_day", motd=settings.motd)
        yield
        log.info("server_stopped")

    app = FastAPI(
        title="Todo List",
        description="Server-rendered todo list stored in DynamoDB, with Bedrock-generated suggestions.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.context = context

    app.add_exception_handler(TodoAppError, todo_error_handler)
    app.add_exception_handler(TemplateError, template_error_handler)
    app.add_exception_handler(StarletteHTTPException, todos_router.method_not_allowed_handler)
    app.add_middleware(RequestLogMiddleware)

    app.include_router(todos_router.router)
    return app
