from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Any

DEFAULT_TEMP_SUFFIX = ".temp"
DEFAULT_CHUNK_SIZE = 1024 * 1024  # 1MB
MIN_CHUNK_SIZE = 1024


@dataclass(frozen=True)
class StoreConfig:
    """Settings for one store file.

    Attributes:
        path: Store file path (made absolute on creation)
        temp_suffix: Suffix of the sibling file written during update/remove
        chunk_size: Block size used when counting lines for sequential ids
        encoding: Text encoding of the store file
        fsync: Whether to fsync the temp file before it replaces the store
        strict: Raise IOCorruptionError on a malformed line followed by more data
            instead of treating it as end of file
        id_field: JSON key holding the id of dict records ("Id" reads stores
            written with that casing)
    """

    path: str
    temp_suffix: str = DEFAULT_TEMP_SUFFIX
    chunk_size: int = DEFAULT_CHUNK_SIZE
    encoding: str = "utf-8"
    fsync: bool = False
    strict: bool = False
    id_field: str = "id"

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", os.path.abspath(os.fspath(self.path)))
        object.__setattr__(self, "chunk_size", max(MIN_CHUNK_SIZE, int(self.chunk_size)))
        if not self.temp_suffix:
            raise ValueError("temp_suffix must not be empty")

    @classmethod
    def create(cls, path: Any, **overrides: Any) -> StoreConfig:
        return cls(path=path, **overrides)

    @property
    def temp_path(self) -> str:
        return self.path + self.temp_suffix

    @property
    def directory(self) -> str:
        return os.path.dirname(self.path)
