from __future__ import annotations

import re
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..context import AppContext, get_context, get_repo, get_todo_generator
from ..errors import BackendUnavailableError, InvalidInputError
from ..generation import TodoGenerator
from ..presentation import templates
from ..repositories import Repository
from ..schemas import TodoCreate, validation_message

router = APIRouter(tags=["todos"])

# Same grammar as a base-10 int64 literal: optional sign, then digits only.
_EPOCH_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN, _INT64_MAX = -(2**63), 2**63 - 1

# Any method other than POST on these paths is a no-op redirect to the list.
WRITE_PATHS = frozenset({"/add", "/generate", "/delete"})


def _back_to_list(ctx: AppContext) -> RedirectResponse:
    return RedirectResponse(url=ctx.settings.url_prefix, status_code=status.HTTP_303_SEE_OTHER)


# PUBLIC_INTERFACE
@router.get("/", response_class=HTMLResponse, summary="List Todos")
def list_todos(
    request: Request,
    ctx: AppContext = Depends(get_context),
) -> HTMLResponse:
    """
    Render the todo list page, newest first.
    """
    todos = ctx.repository.list_todos()
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "todos": todos,
            "motd": ctx.settings.motd,
            "prefix": ctx.settings.url_prefix,
            "generation_enabled": ctx.generator is not None,
        },
    )


# PUBLIC_INTERFACE
@router.post("/add", summary="Add Todo")
def add_todo(
    text: str = Form(""),
    ctx: AppContext = Depends(get_context),
    repo: Repository = Depends(get_repo),
) -> RedirectResponse:
    """
    Create a todo from the submitted `text` field. An empty field is ignored.
    """
    if text == "":
        return _back_to_list(ctx)
    try:
        payload = TodoCreate(text=text)
    except ValidationError as exc:
        raise InvalidInputError(validation_message(exc)) from exc
    repo.create(payload)
    return _back_to_list(ctx)


# PUBLIC_INTERFACE
@router.post("/generate", summary="Generate Todo")
def generate_todo(
    ctx: AppContext = Depends(get_context),
    repo: Repository = Depends(get_repo),
    generator: Optional[TodoGenerator] = Depends(get_todo_generator),
) -> RedirectResponse:
    """
    Ask the text model for a todo and store it.
    """
    if generator is None:
        raise BackendUnavailableError("text generation is not configured")
    repo.create(generator.generate())
    return _back_to_list(ctx)


# PUBLIC_INTERFACE
@router.post("/delete", summary="Delete Todo")
def delete_todo(
    todo_id: str = Form("", alias="id"),
    created_at_epoch: str = Form("", alias="createdAtEpoch"),
    ctx: AppContext = Depends(get_context),
    repo: Repository = Depends(get_repo),
) -> RedirectResponse:
    """
    Delete the todo identified by the hidden `id` and `createdAtEpoch` fields.
    """
    if not _EPOCH_RE.fullmatch(created_at_epoch):
        raise InvalidInputError("invalid createdAtEpoch")
    epoch = int(created_at_epoch)
    if not _INT64_MIN <= epoch <= _INT64_MAX:
        raise InvalidInputError("invalid createdAtEpoch")
    repo.delete(todo_id, epoch)
    return _back_to_list(ctx)


async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """
    Redirect non-POST requests on the write routes back to the list; every
    other HTTP error keeps FastAPI's default response.
    """
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED and request.url.path in WRITE_PATHS:
        return _back_to_list(get_context(request))
    return await http_exception_handler(request, exc)
