from __future__ import annotations

import time
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from threading import RLock
from typing import Callable, Iterable, List, Optional, Tuple

import structlog

from .errors import ConfigurationError
from .models import TodoEntity
from .schemas import TodoCreate, TodoOut
from .settings import Settings

log = structlog.get_logger(__name__)

DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S"

Clock = Callable[[], float]


def format_epoch(epoch: int) -> str:
    """Format seconds since the epoch as 'YYYY-MM-DD HH:MM:SS' in server local time."""
    return datetime.fromtimestamp(epoch).strftime(DISPLAY_FORMAT)


def to_out(entity: TodoEntity) -> TodoOut:
    return TodoOut(
        id=entity["id"],
        text=entity["text"],
        created_at_epoch=entity["created_at_epoch"],
        created_at_formatted=format_epoch(entity["created_at_epoch"]),
    )


# PUBLIC_INTERFACE
class Repository(ABC):
    """
    Abstract repository contract for todo storage backends.

    Subclasses implement the raw storage calls (`_scan`, `_put`, `_delete`);
    id generation, timestamps, display formatting and ordering live here so
    every backend behaves the same.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock = clock or time.time

    def _now(self) -> int:
        return int(self._clock())

    @abstractmethod
    def _scan(self) -> Iterable[TodoEntity]:
        """Yield every stored todo, following continuation tokens if any."""

    @abstractmethod
    def _put(self, entity: TodoEntity) -> None:
        """Write the entity unconditionally."""

    @abstractmethod
    def _delete(self, key: Tuple[str, int]) -> None:
        """Delete the entity with this (id, created_at_epoch) key, if present."""

    def list_todos(self) -> List[TodoOut]:
        """
        Return all todos, newest first, each with its formatted creation time.
        """
        todos = [to_out(entity) for entity in self._scan()]
        todos.sort(key=lambda t: t.created_at_epoch, reverse=True)
        return todos

    def create(self, data: TodoCreate) -> TodoEntity:
        """Create and return a new TodoEntity with a fresh id and the current time."""
        entity: TodoEntity = {
            "id": str(uuid.uuid4()),
            "text": data.text,
            "created_at_epoch": self._now(),
        }
        self._put(entity)
        log.info("todo_created", todo_id=entity["id"], created_at_epoch=entity["created_at_epoch"])
        return entity

    def delete(self, todo_id: str, created_at_epoch: int) -> None:
        """Delete a todo by its composite key. Deleting a missing todo is not an error."""
        self._delete((todo_id, created_at_epoch))
        log.info("todo_deleted", todo_id=todo_id, created_at_epoch=created_at_epoch)


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository for local runs without AWS and for tests.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        super().__init__(clock)
        self._lock = RLock()
        self._items: dict[Tuple[str, int], TodoEntity] = {}

    def _scan(self) -> Iterable[TodoEntity]:
        with self._lock:
            # Return copies to avoid external mutation
            return [item.copy() for item in self._items.values()]

    def _put(self, entity: TodoEntity) -> None:
        with self._lock:
            self._items[(entity["id"], entity["created_at_epoch"])] = entity.copy()

    def _delete(self, key: Tuple[str, int]) -> None:
        with self._lock:
            self._items.pop(key, None)


# PUBLIC_INTERFACE
def get_repository(settings: Settings) -> Repository:
    """
    Factory to return the configured repository based on settings.
    - dynamodb: DynamoDBRepository on settings.dynamodb_table
    - memory: InMemoryRepository (contents are lost on restart)
    """
    if settings.persistence_backend == "memory":
        return InMemoryRepository()

    from .aws import dynamodb_client
    from .dynamodb import DynamoDBRepository

    if settings.aws_region is None:
        raise ConfigurationError("AWS_REGION environment variable not set")
    if settings.dynamodb_table is None:
        raise ConfigurationError("DYNAMODB_TABLE environment variable not set")
    return DynamoDBRepository(dynamodb_client(settings), settings.dynamodb_table)
