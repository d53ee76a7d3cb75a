from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from .errors import BackendBadResponseError, BackendUnavailableError
from .models import TodoEntity
from .repositories import Clock, Repository


@dataclass(frozen=True)
class _Attrs:
    id: str = "Id"
    text: str = "Text"
    created_at_epoch: str = "CreatedAtEpoch"


_ATTRS = _Attrs()

AttributeMap = Dict[str, Dict[str, Any]]


def _key(todo_id: str, created_at_epoch: int) -> AttributeMap:
    return {
        _ATTRS.id: {"S": todo_id},
        _ATTRS.created_at_epoch: {"N": str(created_at_epoch)},
    }


def entity_to_item(entity: TodoEntity) -> AttributeMap:
    item = _key(entity["id"], entity["created_at_epoch"])
    item[_ATTRS.text] = {"S": entity["text"]}
    return item


def item_to_entity(item: AttributeMap) -> TodoEntity:
    """
    Decode a raw DynamoDB item.

    Raises:
        BackendBadResponseError: an attribute is missing or has the wrong type.
    """
    try:
        return {
            "id": item[_ATTRS.id]["S"],
            "text": item[_ATTRS.text]["S"],
            "created_at_epoch": int(item[_ATTRS.created_at_epoch]["N"]),
        }
    except (KeyError, TypeError, ValueError) as exc:
        raise BackendBadResponseError(f"malformed todo item in table: {exc!r}") from exc


class DynamoDBRepository(Repository):
    """
    Repository on a DynamoDB table with partition key `Id` (S) and sort key
    `CreatedAtEpoch` (N).

    Every boto3 call is made once; transport and service errors become
    BackendUnavailableError with the failing operation in the message.
    """

    def __init__(self, client: Any, table_name: str, clock: Optional[Clock] = None) -> None:
        super().__init__(clock)
        self._client = client
        self._table = table_name

    def _scan(self) -> Iterable[TodoEntity]:
        try:
            return [item_to_entity(item) for item in self._scan_items()]
        except (BotoCoreError, ClientError) as exc:
            raise BackendUnavailableError(f"failed to get todos: {exc}") from exc

    def _scan_items(self) -> Iterator[AttributeMap]:
        # The paginator follows LastEvaluatedKey until the table is exhausted.
        paginator = self._client.get_paginator("scan")
        for page in paginator.paginate(TableName=self._table):
            yield from page.get("Items", [])

    def _put(self, entity: TodoEntity) -> None:
        try:
            self._client.put_item(TableName=self._table, Item=entity_to_item(entity))
        except (BotoCoreError, ClientError) as exc:
            raise BackendUnavailableError(f"failed to add todo: {exc}") from exc

    def _delete(self, key: Tuple[str, int]) -> None:
        try:
            self._client.delete_item(TableName=self._table, Key=_key(*key))
        except (BotoCoreError, ClientError) as exc:
            raise BackendUnavailableError(f"failed to delete todo: {exc}") from exc
