from __future__ import annotations
import logging
import os
from contextlib import closing
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Iterator, TextIO, TypeVar, Union

from .codec import LineCodec
from .config import StoreConfig
from .counter import count_file_lines
from .errors import IOCorruptionError, StoreAccessError

logger = logging.getLogger(__name__)

E = TypeVar("E")

NEWLINE = "\n"


class Action(Enum):
    KEEP = "keep"
    DROP = "drop"


KEEP = Action.KEEP
DROP = Action.DROP


@dataclass(frozen=True)
class Replace(Generic[E]):
    """Rewrite outcome: write ``entity`` in place of the scanned record."""
    entity: E


Outcome = Union[Action, Replace]
Transform = Callable[[E], Outcome]


@dataclass
class RewriteStats:
    scanned: int = 0
    kept: int = 0
    replaced: int = 0
    dropped: int = 0


class FileStorage(Generic[E]):
    """
    Line-oriented I/O over one store file.

    The store keeps no state in memory: every call opens its own handle.
    Reads stop at the first line that does not decode (the empty read at EOF
    included). Writers are expected to be serialized by the caller.
    """
    def __init__(self, config: StoreConfig, codec: LineCodec[E]) -> None:
        self.config = config
        self.codec = codec

    @property
    def path(self) -> str:
        return self.config.path

    # ----- Reading -----

    def _open_read(self) -> TextIO:
        try:
            return open(self.path, "r", encoding=self.config.encoding)
        except OSError as e:
            raise StoreAccessError(self.path, "read") from e

    def scan(self) -> Iterator[E]:
        """
        Lazily decode records in file order. The file is opened on first
        iteration and closed when the iterator is exhausted or closed.
        """
        with self._open_read() as f:
            line_no = 0
            while True:
                line = f.readline()
                line_no += 1
                entity = self.codec.decode(line)
                if entity is None:
                    if self.config.strict:
                        self._check_clean_eof(f, line, line_no)
                    return
                yield entity

    @staticmethod
    def _check_clean_eof(f: TextIO, line: str, line_no: int) -> None:
        if line.strip():
            raise IOCorruptionError(f"line {line_no} is not a valid record", line_no)
        # A blank line is only acceptable when nothing but blank lines follows it
        for extra in f:
            if extra.strip():
                raise IOCorruptionError(f"blank line {line_no} followed by more records", line_no)

    def count_lines(self) -> int:
        try:
            return count_file_lines(self.path, self.config.chunk_size)
        except OSError as e:
            raise StoreAccessError(self.path, "read") from e

    # ----- Writing -----

    def append(self, entity: E) -> None:
        """Append one encoded record. Never creates the store file."""
        data_str = self.codec.check(entity)
        try:
            fd = os.open(self.path, os.O_WRONLY | os.O_APPEND)
        except OSError as e:
            raise StoreAccessError(self.path, "append to") from e
        with os.fdopen(fd, "w", encoding=self.config.encoding, newline="") as f:
            f.write(data_str + NEWLINE)
            f.flush()
            if self.config.fsync:
                os.fsync(f.fileno())

    def rewrite(self, transform: Transform) -> RewriteStats:
        """
        Stream every record through ``transform`` into the temp file, then swap
        the temp file in for the store. On any failure before the swap the temp
        file is discarded and the store is left as it was.
        """
        tmp_path = self.config.temp_path
        stats = RewriteStats()
        try:
            out = open(tmp_path, "w", encoding=self.config.encoding, newline="")
        except OSError as e:
            raise StoreAccessError(tmp_path, "create") from e
        try:
            with out, closing(self.scan()) as records:
                for entity in records:
                    stats.scanned += 1
                    outcome = transform(entity)
                    if outcome is KEEP:
                        out.write(self.codec.encode(entity) + NEWLINE)
                        stats.kept += 1
                    elif outcome is DROP:
                        stats.dropped += 1
                    elif isinstance(outcome, Replace):
                        out.write(self.codec.check(outcome.entity) + NEWLINE)
                        stats.replaced += 1
                    else:
                        raise TypeError(f"unsupported rewrite outcome: {outcome!r}")
                out.flush()
                if self.config.fsync:
                    os.fsync(out.fileno())
            self.replace_file(tmp_path)
        except BaseException:
            self._discard(tmp_path)
            raise
        return stats

    def replace_file(self, tmp_path: str) -> None:
        try:
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StoreAccessError(self.path, "replace") from e
        if self.config.fsync:
            self._fsync_dir()
        logger.debug("Replaced %s with %s", self.path, tmp_path)

    def _fsync_dir(self) -> None:
        if not hasattr(os, "O_DIRECTORY"):
            return
        fd = os.open(self.config.directory, os.O_RDONLY | os.O_DIRECTORY)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)

    @staticmethod
    def _discard(tmp_path: str) -> None:
        try:
            os.remove(tmp_path)
        except FileNotFoundError:
            pass
