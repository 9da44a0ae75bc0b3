from __future__ import annotations
from typing import Any, Optional


class StoreError(Exception):
    """Base class for all record store failures."""


class ConfigurationError(StoreError, ValueError):
    """
    Store cannot be used as configured: the parent directory of the store path
    does not exist, or the entity type does not expose an ``id`` field.
    """


class StoreAccessError(StoreError, OSError):
    """Store file could not be opened, appended to or replaced."""

    def __init__(self, path: str, action: str) -> None:
        super().__init__(f"cannot {action} store file {path}")
        self.path = path
        self.action = action


class DuplicateIdError(StoreError):
    """Key violation: an entity with the same id already exists."""

    def __init__(self, rec_id: Any) -> None:
        super().__init__(f"Key violation: Id {rec_id} already exists")
        self.id = rec_id


class IOCorruptionError(StoreError):
    def __init__(self, msg: str, line_no: Optional[int] = None) -> None:
        super().__init__(msg)
        self.line_no = line_no


class InvalidEntityError(StoreError, ValueError):
    """Entity would be written as a line that does not decode back into a record."""
