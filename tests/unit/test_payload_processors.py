from dataclasses import dataclass

from pydantic import BaseModel
import pytest

from json_transactions.core.exceptions import (
    MissingPayloadError,
    PayloadConstructionError,
)
from json_transactions.payload import (
    array_payload,
    dictionary_payload,
    optional_payload,
    required_payload,
    typed_payload,
)

pytestmark = pytest.mark.unit


class Widget(BaseModel):
    id: int
    name: str
    tags: list[str] = []


@dataclass
class Point:
    x: float
    y: float


def test_required_payload_passes_value_through():
    value = {"a": [1, 2]}
    assert required_payload(value, b"...") is value


@pytest.mark.parametrize("value", [0, False, "", [], {}])
def test_required_payload_accepts_falsy_json(value):
    assert required_payload(value, b"x") == value


def test_required_payload_rejects_absent_json():
    with pytest.raises(MissingPayloadError):
        required_payload(None, b"")


def test_optional_payload_never_raises_for_absence():
    assert optional_payload(None, b"") is None
    assert optional_payload([1], b"[1]") == [1]


def test_dictionary_payload_requires_object_root():
    assert dictionary_payload({"k": "v"}, b"") == {"k": "v"}
    with pytest.raises(PayloadConstructionError, match="array"):
        dictionary_payload([1, 2, 3], b"[1,2,3]")
    with pytest.raises(MissingPayloadError):
        dictionary_payload(None, b"")


def test_array_payload_requires_array_root():
    assert array_payload([1], b"[1]") == [1]
    with pytest.raises(PayloadConstructionError, match="object"):
        array_payload({"k": 1}, b'{"k":1}')
    with pytest.raises(PayloadConstructionError, match="string"):
        array_payload("s", b'"s"')


def test_typed_payload_builds_model():
    process = typed_payload(Widget)
    widget = process({"id": "7", "name": "gear"}, b"")
    assert widget == Widget(id=7, name="gear")


def test_typed_payload_reports_field_problems():
    process = typed_payload(Widget)
    with pytest.raises(PayloadConstructionError) as ei:
        process({"name": "gear"}, b"")
    assert "Widget" in ei.value.message
    assert "id" in ei.value.message


def test_typed_payload_wrong_root_type():
    with pytest.raises(PayloadConstructionError):
        typed_payload(Widget)([1, 2, 3], b"")


def test_typed_payload_supports_plain_annotations():
    assert typed_payload(list[int])(["1", 2], b"") == [1, 2]
    assert typed_payload(Point)({"x": 1, "y": 2.5}, b"") == Point(1.0, 2.5)


def test_typed_payload_absence():
    with pytest.raises(MissingPayloadError):
        typed_payload(Widget)(None, b"")
    assert typed_payload(Widget, optional=True)(None, b"") is None
