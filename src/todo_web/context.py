from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from .generation import TodoGenerator
from .repositories import Repository
from .settings import Settings


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class AppContext:
    """
    Everything a request handler needs, built once at startup and stored on
    `app.state.context`.
    """

    settings: Settings
    repository: Repository
    generator: Optional[TodoGenerator]


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_repo(request: Request) -> Repository:
    return get_context(request).repository


def get_todo_generator(request: Request) -> Optional[TodoGenerator]:
    return get_context(request).generator
