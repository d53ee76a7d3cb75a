from __future__ import annotations

from typing import TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A todo as it is held by the storage backends.

    Fields:
    - id: UUID4 string generated at creation
    - text: 1..200 printable characters (validated via schemas)
    - created_at_epoch: creation time in whole seconds since the epoch; together
      with id it forms the key used for deletion
    """

    id: str
    text: str
    created_at_epoch: int
