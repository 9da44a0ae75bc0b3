import pytest
from pydantic import BaseModel, Field

from conftest import Address, Order, Point, User
from jsonl_entity_store import ConfigurationError, InvalidEntityError, JsonEntity, LineCodec

def test_encode_is_single_line():
    codec = LineCodec(User)
    line = codec.encode(User(id=3, name="multi\nline\rname", categories=["a"]))
    assert "\n" not in line and "\r" not in line
    assert line == '{"id":3,"name":"multi\\nline\\rname","age":0,"active":true,"categories":["a"]}'
    assert codec.decode(line) == User(id=3, name="multi\nline\rname", categories=["a"])

def test_non_ascii_kept_verbatim():
    assert LineCodec(dict).encode({"id": 1, "name": "Zoë"}) == '{"id":1,"name":"Zoë"}'
    assert LineCodec(User).encode(User(id=1, name="Zoë")).startswith('{"id":1,"name":"Zoë"')

@pytest.mark.parametrize("text", [
    None,
    "",
    "   \n",
    "not json\n",
    "[1, 2]\n",
    '{"name":"no id"}\n',
    '{"id":"7"}\n',
    '{"id":true}\n',
    '{"id":1.5}\n',
    '{"id":9223372036854775808}\n',
])
@pytest.mark.parametrize("entity_type", [dict, User])
def test_decode_failures_return_none(text, entity_type):
    assert LineCodec(entity_type).decode(text) is None

def test_decode_ignores_unknown_fields():
    codec = LineCodec(User)
    assert codec.decode('{"id":1,"nickname":"x"}') == User(id=1)

def test_nested_model_decodes_to_model():
    codec = LineCodec(Order)
    got = codec.decode('{"id":4,"address":{"city":"Wien"},"items":[]}')
    assert got == Order(id=4, address=Address(city="Wien"))

def test_id_range_bounds():
    codec = LineCodec(dict)
    assert codec.decode('{"id":9223372036854775807}') == {"id": 2 ** 63 - 1}
    assert codec.decode('{"id":-9223372036854775808}') == {"id": -(2 ** 63)}
    assert LineCodec(User).decode('{"id":-9223372036854775808}').id == -(2 ** 63)

def test_entity_type_must_have_id():
    class NoId(BaseModel):
        name: str = ""

    with pytest.raises(ConfigurationError):
        LineCodec(NoId)
    with pytest.raises(ConfigurationError):
        LineCodec(list)

def test_aliased_id_field():
    class Legacy(JsonEntity):
        id: int = Field(default=0, alias="Id")
        name: str = Field(default="", alias="Name")

    codec = LineCodec(Legacy)
    line = codec.encode(Legacy(id=3, name="x"))
    assert line == '{"Id":3,"Name":"x"}'
    assert codec.decode(line).id == 3

def test_dict_id_field():
    codec = LineCodec(dict, id_field="Id")
    assert codec.decode('{"Id":1}') == {"Id": 1}
    assert codec.decode('{"id":1}') is None
    assert codec.id_of({"Id": 5}) == 5

def test_with_id():
    codec = LineCodec(User)
    u = User(id=1)
    u2 = codec.with_id(u, 5)
    assert u.id == 1 and u2.id == 5
    p2 = LineCodec(Point).with_id(Point(id=1), 5)
    assert p2.id == 5
    d = {"id": 1}
    assert LineCodec(dict).with_id(d, 2) is d and d["id"] == 2
    assert LineCodec(dict).id_of({"name": "x"}) is None
    with pytest.raises(InvalidEntityError):
        codec.with_id(42, 1)

def test_check():
    codec = LineCodec(dict)
    assert codec.check({"id": 1}) == '{"id":1}'
    for bad in ({"name": "x"}, {"id": "1"}, {"id": 1, "blob": object()}, [1]):
        with pytest.raises(InvalidEntityError):
            codec.check(bad)
    with pytest.raises(InvalidEntityError):
        LineCodec(User).check(Point(id=1))
