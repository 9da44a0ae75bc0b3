from .codec import JsonEntity, LineCodec
from .config import StoreConfig
from .counter import count_file_lines, count_lines
from .database import Database
from .errors import (
    ConfigurationError,
    DuplicateIdError,
    InvalidEntityError,
    IOCorruptionError,
    StoreAccessError,
    StoreError,
)
from .query import compile_query
from .storage import DROP, KEEP, FileStorage, Replace, RewriteStats

__all__ = [
    "Database",
    "StoreConfig",
    "FileStorage",
    "LineCodec",
    "JsonEntity",
    "KEEP",
    "DROP",
    "Replace",
    "RewriteStats",
    "count_lines",
    "count_file_lines",
    "compile_query",
    "StoreError",
    "ConfigurationError",
    "StoreAccessError",
    "DuplicateIdError",
    "InvalidEntityError",
    "IOCorruptionError",
]
