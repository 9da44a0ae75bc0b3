from __future__ import annotations
from typing import List

import pytest
from pydantic import BaseModel, ConfigDict

from jsonl_entity_store import JsonEntity


class User(JsonEntity):
    name: str = ""
    age: int = 0
    active: bool = True
    categories: List[str] = []


class Point(JsonEntity):
    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0


class Address(BaseModel):
    city: str
    zip: str = ""


class Order(JsonEntity):
    address: Address
    items: List[str] = []


@pytest.fixture
def store_path(tmp_path):
    p = tmp_path / "users.jsonl"
    p.touch()
    return p
