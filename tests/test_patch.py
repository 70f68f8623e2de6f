import json
import pytest

from patchable.models import Customer, customer_schema
from patchable.patch import (
    JSON,
    JSON_PATCH,
    BodyParseError,
    Entity,
    JSONPatch,
    PartialPatch,
    PatchError,
    is_readable,
    read,
)
from patchable.resource import BadRequest, UnsupportedMediaType


def _first():
    return Customer(id=1, name="First customer")


def _second():
    return Customer(id=2, name="Second customer", phone_numbers=["01234", "56789"])


def _apply(patch, target):
    return patch.apply(target, customer_schema)


# -- JSON Patch -----


def test_json_patch_replace():
    result = _apply(JSONPatch([{"op": "replace", "path": "/name", "value": "Y"}]), _second())
    assert result == Customer(id=2, name="Y", phone_numbers=["01234", "56789"])


def test_json_patch_updates_target_in_place():
    target = _second()
    result = _apply(JSONPatch([{"op": "replace", "path": "/name", "value": "Y"}]), target)
    assert result is target
    assert target.name == "Y"


def test_json_patch_add_to_list():
    result = _apply(
        JSONPatch([{"op": "add", "path": "/phoneNumbers/-", "value": "999"}]), _second()
    )
    assert result.phone_numbers == ["01234", "56789", "999"]


def test_json_patch_add_replaces_null_list():
    result = _apply(
        JSONPatch([{"op": "add", "path": "/phoneNumbers", "value": ["999"]}]), _first()
    )
    assert result.phone_numbers == ["999"]


def test_json_patch_remove_list_item():
    result = _apply(JSONPatch([{"op": "remove", "path": "/phoneNumbers/0"}]), _second())
    assert result.phone_numbers == ["56789"]


def test_json_patch_move_list_item():
    patch = JSONPatch([{"op": "move", "from": "/phoneNumbers/0", "path": "/phoneNumbers/-"}])
    assert _apply(patch, _second()).phone_numbers == ["56789", "01234"]


def test_json_patch_copy_list_item():
    patch = JSONPatch([{"op": "copy", "from": "/phoneNumbers/1", "path": "/phoneNumbers/0"}])
    assert _apply(patch, _second()).phone_numbers == ["56789", "01234", "56789"]


def test_json_patch_test_success():
    patch = JSONPatch(
        [
            {"op": "test", "path": "/name", "value": "Second customer"},
            {"op": "replace", "path": "/name", "value": "Y"},
        ]
    )
    assert _apply(patch, _second()).name == "Y"


def test_json_patch_test_failure():
    target = _second()
    patch = JSONPatch([{"op": "test", "path": "/name", "value": "wrong"}])
    with pytest.raises(PatchError):
        _apply(patch, target)
    assert target == _second()


def test_json_patch_failure_applies_nothing():
    target = _second()
    patch = JSONPatch(
        [
            {"op": "replace", "path": "/name", "value": "Y"},
            {"op": "test", "path": "/name", "value": "wrong"},
        ]
    )
    with pytest.raises(PatchError):
        _apply(patch, target)
    assert target == _second()


def test_json_patch_operations_apply_in_order():
    patch = JSONPatch(
        [
            {"op": "replace", "path": "/name", "value": "Y"},
            {"op": "test", "path": "/name", "value": "Y"},
            {"op": "replace", "path": "/name", "value": "Z"},
        ]
    )
    assert _apply(patch, _second()).name == "Z"


def test_json_patch_remove_absent_path():
    with pytest.raises(PatchError):
        _apply(JSONPatch([{"op": "remove", "path": "/phoneNumbers/5"}]), _second())


def test_json_patch_replace_absent_path():
    with pytest.raises(PatchError):
        _apply(JSONPatch([{"op": "replace", "path": "/email", "value": "x"}]), _second())


def test_json_patch_pointer_into_null():
    with pytest.raises(PatchError):
        _apply(JSONPatch([{"op": "add", "path": "/phoneNumbers/-", "value": "1"}]), _first())


def test_json_patch_remove_field_leaves_target_untouched():
    result = _apply(JSONPatch([{"op": "remove", "path": "/name"}]), _second())
    assert result.name == "Second customer"


def test_json_patch_unknown_property():
    with pytest.raises(PatchError):
        _apply(JSONPatch([{"op": "add", "path": "/email", "value": "x"}]), _second())


def test_json_patch_type_mismatch():
    with pytest.raises(PatchError) as info:
        _apply(JSONPatch([{"op": "replace", "path": "/name", "value": 5}]), _second())
    assert info.value.__cause__ is not None


def test_json_patch_unknown_operation():
    with pytest.raises(PatchError):
        _apply(JSONPatch([{"op": "frobnicate", "path": "/name"}]), _second())


def test_json_patch_missing_value():
    with pytest.raises(PatchError):
        _apply(JSONPatch([{"op": "replace", "path": "/name"}]), _second())


def test_json_patch_not_a_list():
    with pytest.raises(PatchError):
        _apply(JSONPatch({"op": "replace", "path": "/name", "value": "Y"}), _second())


def test_json_patch_replace_root_with_non_object():
    with pytest.raises(PatchError):
        _apply(JSONPatch([{"op": "replace", "path": "", "value": [1]}]), _second())


def test_json_patch_empty():
    assert _apply(JSONPatch([]), _second()) == _second()


# -- partial patch -----


def test_partial_patch_name():
    result = _apply(PartialPatch({"name": "X"}), _second())
    assert result == Customer(id=2, name="X", phone_numbers=["01234", "56789"])


def test_partial_patch_phone_numbers():
    result = _apply(PartialPatch({"phoneNumbers": ["999"]}), _second())
    assert result == Customer(id=2, name="Second customer", phone_numbers=["999"])


def test_partial_patch_null():
    assert _apply(PartialPatch({"name": None}), _second()).name is None


def test_partial_patch_empty():
    assert _apply(PartialPatch({}), _second()) == _second()


def test_partial_patch_idempotent():
    patch = PartialPatch({"name": "X", "phoneNumbers": ["1", "2"]})
    once = _apply(patch, _second())
    twice = _apply(patch, _apply(patch, _second()))
    assert once == twice == Customer(id=2, name="X", phone_numbers=["1", "2"])


def test_partial_patch_does_not_share_document():
    patch = PartialPatch({"phoneNumbers": ["1"]})
    result = _apply(patch, _second())
    result.phone_numbers.append("2")
    assert patch.patch == {"phoneNumbers": ["1"]}


def test_partial_patch_type_mismatch():
    target = _second()
    with pytest.raises(PatchError):
        _apply(PartialPatch({"name": "X", "phoneNumbers": "999"}), target)
    assert target == _second()


def test_partial_patch_unknown_property():
    with pytest.raises(PatchError):
        _apply(PartialPatch({"email": "x"}), _second())


def test_partial_patch_not_object():
    with pytest.raises(PatchError):
        _apply(PartialPatch([{"op": "replace", "path": "/name", "value": "X"}]), _second())


# -- negotiation -----


def test_is_readable():
    assert is_readable(JSON)
    assert is_readable(JSON_PATCH)
    assert is_readable("application/json; charset=utf-8")
    assert is_readable("Application/JSON-Patch+JSON")
    assert not is_readable("text/plain")
    assert not is_readable("application/merge-patch+json")
    assert not is_readable(None)


def test_read_json_patch():
    doc = [{"op": "replace", "path": "/name", "value": "Y"}]
    patch = read(JSON_PATCH, json.dumps(doc).encode())
    assert isinstance(patch, JSONPatch)
    assert patch.patch == doc


def test_read_partial():
    patch = read("application/json; charset=utf-8", b'{"name": "X"}')
    assert isinstance(patch, PartialPatch)
    assert patch.patch == {"name": "X"}


def test_read_unsupported():
    with pytest.raises(UnsupportedMediaType):
        read("text/plain", b'{"name": "X"}')


def test_read_malformed():
    with pytest.raises(BodyParseError) as info:
        read(JSON_PATCH, b'[{"op": "replace"')
    assert isinstance(info.value, BadRequest)
    assert info.value.code == 400


def test_read_undecodable():
    with pytest.raises(BodyParseError):
        read(JSON, b"\xff\xfe")


def test_read_empty():
    with pytest.raises(BodyParseError):
        read(JSON, b"")


def test_entity_read_deferred():
    entity = Entity(JSON, b"{not json")
    with pytest.raises(BodyParseError):
        entity.read()


def test_entity_read():
    patch = Entity(JSON, b'{"name": "X"}').read()
    assert _apply(patch, _first()).name == "X"


def test_read_rejects_nan():
    with pytest.raises(BodyParseError):
        read(JSON_PATCH, b'[{"op": "replace", "path": "/id", "value": NaN}]')


def test_read_deeply_nested():
    with pytest.raises(BodyParseError):
        read(JSON, b"[" * 100000 + b"]" * 100000)


def test_partial_patch_overflowing_number():
    target = _second()
    with pytest.raises(PatchError):
        _apply(PartialPatch({"id": float("inf")}), target)
    assert target == _second()


def test_json_patch_nan_value():
    with pytest.raises(PatchError):
        _apply(JSONPatch([{"op": "replace", "path": "/id", "value": float("nan")}]), _second())
