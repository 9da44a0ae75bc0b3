from __future__ import annotations
import json
from typing import Any, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError

from .errors import ConfigurationError, InvalidEntityError

ID_FIELD = "id"

ID_MIN = -(2 ** 63)
ID_MAX = 2 ** 63 - 1

E = TypeVar("E")


class JsonEntity(BaseModel):
    """
    Base for typed records. Unknown keys in a stored line are ignored so a
    store written by a newer model still reads with an older one.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: StrictInt = Field(ge=ID_MIN, le=ID_MAX)


def compact_json(obj: Any) -> str:
    # json escapes control characters, so the result never spans lines
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"))


def _valid_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and ID_MIN <= value <= ID_MAX


class LineCodec(Generic[E]):
    """
    Maps entities to single JSON lines and back.

    ``entity_type`` is either ``dict`` (records stay plain JSON objects keyed
    by ``id_field``) or a pydantic model with an ``id`` field; a model may map
    it to another JSON key with ``Field(alias=...)``. Decoding never raises:
    any line that does not produce a valid entity decodes to None, which
    scanning treats as the end of the store.
    """

    def __init__(self, entity_type: Type[E] = dict, id_field: str = ID_FIELD) -> None:  # type: ignore[assignment]
        if entity_type is not dict:
            if not (isinstance(entity_type, type) and issubclass(entity_type, BaseModel)):
                raise ConfigurationError(f"{entity_type!r} is neither dict nor a pydantic model")
            if ID_FIELD not in entity_type.model_fields:
                raise ConfigurationError(f"{entity_type.__name__} has no '{ID_FIELD}' field")
        self.entity_type = entity_type
        self.id_field = id_field

    @property
    def is_model(self) -> bool:
        return self.entity_type is not dict

    def id_of(self, entity: Any) -> Any:
        if isinstance(entity, dict):
            return entity.get(self.id_field)
        return getattr(entity, ID_FIELD, None)

    def with_id(self, entity: E, new_id: int) -> E:
        """Dicts get ``new_id`` in place; models come back as an updated copy."""
        if isinstance(entity, dict):
            entity[self.id_field] = new_id
            return entity
        if not isinstance(entity, BaseModel):
            raise InvalidEntityError(f"cannot assign an id to {type(entity).__name__}")
        return entity.model_copy(update={ID_FIELD: new_id})  # type: ignore[attr-defined]

    def encode(self, entity: E) -> str:
        if isinstance(entity, BaseModel):
            return entity.model_dump_json(by_alias=True)
        return compact_json(entity)

    def decode(self, text: Optional[str]) -> Optional[E]:
        if not text or not text.strip():
            return None
        if self.is_model:
            try:
                entity = self.entity_type.model_validate_json(text)  # type: ignore[attr-defined]
            except ValidationError:
                return None
            return entity if _valid_id(entity.id) else None
        try:
            obj = json.loads(text)
        except ValueError:
            return None
        if not isinstance(obj, dict) or not _valid_id(obj.get(self.id_field)):
            return None
        return obj  # type: ignore[return-value]

    def check(self, entity: E) -> str:
        """
        Encode ``entity`` and make sure the line reads back; a line that does
        not would end every later scan early.
        """
        if self.is_model and not isinstance(entity, self.entity_type):
            raise InvalidEntityError(f"expected {self.entity_type.__name__}, got {type(entity).__name__}")
        if not self.is_model and not isinstance(entity, dict):
            raise InvalidEntityError(f"expected dict, got {type(entity).__name__}")
        try:
            line = self.encode(entity)
        except (TypeError, ValueError) as e:
            raise InvalidEntityError(f"entity is not JSON serializable: {e}") from e
        if self.decode(line) is None:
            raise InvalidEntityError(f"entity does not read back as a record: {line}")
        return line
