from __future__ import annotations
import logging
import os
from contextlib import closing
from typing import Any, Generic, Iterable, List, Optional, Type, TypeVar, Union

from .codec import LineCodec
from .config import StoreConfig
from .errors import ConfigurationError, DuplicateIdError
from .progress import Progress, ProgressCallback
from .query import PredicateLike, compile_query
from .storage import DROP, KEEP, FileStorage, Replace

logger = logging.getLogger(__name__)

E = TypeVar("E")


class Database(Generic[E]):
    """
    Record store over a JSON-lines file.

    Every operation reopens the file; nothing is cached between calls. Reads
    stream the file forward, update/remove stream it into a temp file that
    then replaces the store. The store file itself must be created by the
    caller; only its parent directory is checked here.

    Predicates may be callables taking an entity or query dicts
    (see ``query.compile_query``).
    """
    def __init__(
        self,
        path: Union[str, "os.PathLike[str]", StoreConfig],
        entity_type: Type[E] = dict,  # type: ignore[assignment]
        *,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        self.config = path if isinstance(path, StoreConfig) else StoreConfig.create(path)
        if not os.path.isdir(self.config.directory):
            raise ConfigurationError(f"Directory {self.config.directory} doesn't exist")
        self._codec: LineCodec[E] = LineCodec(entity_type, self.config.id_field)
        self._fs: FileStorage[E] = FileStorage(self.config, self._codec)
        self._progress = Progress(on_progress)

    @property
    def path(self) -> str:
        return self.config.path

    @property
    def entity_type(self) -> Type[E]:
        return self._codec.entity_type

    # ----- Mutations -----

    def insert(self, entity: E, generate_sequential_id: bool = False, verbose: bool = False) -> E:
        """
        Append an entity. With ``generate_sequential_id`` its id becomes the
        current line count (no uniqueness check); otherwise an existing id
        raises DuplicateIdError before the file is touched. An entity that
        would not read back raises InvalidEntityError, also before any write.
        """
        codec = self._codec
        if generate_sequential_id:
            entity = codec.with_id(entity, self._fs.count_lines())
            codec.check(entity)
        else:
            codec.check(entity)
            rec_id = codec.id_of(entity)
            if self.any(lambda e: codec.id_of(e) == rec_id):
                raise DuplicateIdError(rec_id)

        self._fs.append(entity)

        if verbose:
            logger.info("Record %r inserted", entity)
        self._progress.done("insert", id=codec.id_of(entity))
        return entity

    def update(self, entity: E, verbose: bool = False) -> int:
        """
        Replace the record(s) sharing ``entity``'s id. Returns how many were
        replaced; zero matches still rewrites the file unchanged.
        """
        self._codec.check(entity)
        rec_id = self._codec.id_of(entity)

        def transform(current: E):
            if self._codec.id_of(current) != rec_id:
                return KEEP
            if verbose:
                logger.info("Updating record from %r to %r", current, entity)
            return Replace(entity)

        self._progress.start("update")
        stats = self._fs.rewrite(transform)
        self._progress.done("update", n=stats.replaced)

        if verbose:
            logger.info("Record %r updated", entity)
        return stats.replaced

    def remove(self, predicate: PredicateLike, verbose: bool = False) -> int:
        cond = compile_query(predicate)

        def transform(current: E):
            if not cond(current):
                return KEEP
            if verbose:
                logger.info("Record %r removed", current)
            return DROP

        self._progress.start("remove")
        stats = self._fs.rewrite(transform)
        self._progress.done("remove", n=stats.dropped)

        if verbose:
            logger.info("%d record(s) removed", stats.dropped)
        return stats.dropped

    # ----- Queries -----

    def first_or_default(self, predicate: Optional[PredicateLike] = None, default: Any = None) -> Optional[E]:
        cond = compile_query(predicate)
        with closing(self._fs.scan()) as records:
            for rec in records:
                if cond is None or cond(rec):
                    return rec
        return default

    def last_or_default(self, predicate: Optional[PredicateLike] = None, default: Any = None) -> Optional[E]:
        cond = compile_query(predicate)
        found = default
        with closing(self._fs.scan()) as records:
            for rec in records:
                if cond is None or cond(rec):
                    found = rec
        return found

    def any(self, predicate: Optional[PredicateLike] = None) -> bool:
        cond = compile_query(predicate)
        with closing(self._fs.scan()) as records:
            for rec in records:
                if cond is None or cond(rec):
                    return True
        return False

    def where(self, predicate: PredicateLike) -> List[E]:
        cond = compile_query(predicate)
        with closing(self._fs.scan()) as records:
            return [rec for rec in records if cond(rec)]

    def to_list(self) -> List[E]:
        with closing(self._fs.scan()) as records:
            return list(records)

    def except_(self, entities: Iterable[E], verbose: bool = False) -> List[E]:
        """Records whose id is not among the ids of ``entities``."""
        excluded = {self._codec.id_of(e) for e in entities}
        out: List[E] = []
        with closing(self._fs.scan()) as records:
            for rec in records:
                if self._codec.id_of(rec) not in excluded:
                    out.append(rec)
                elif verbose:
                    logger.info("Record %r ignored", rec)
        return out
