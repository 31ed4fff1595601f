from collections import OrderedDict
from decimal import Decimal
import json

import httpx
import pytest

from json_transactions.core.types import (
    Failed,
    JSONReadingOptions,
    ResponseMetadata,
    Succeeded,
    is_result,
)

pytestmark = pytest.mark.unit


def test_results_are_frozen():
    ok = Succeeded({"x": 1}, "meta")
    with pytest.raises(AttributeError):
        ok.payload = {}  # type: ignore[misc]
    failed = Failed(ValueError("e"))
    with pytest.raises(AttributeError):
        failed.error = None  # type: ignore[misc]


def test_failed_error_parameter_is_bound_to_exception():
    (error_param,) = Failed.__parameters__
    assert error_param.__bound__ is Exception


def test_is_result():
    assert is_result(Succeeded(1, None))
    assert is_result(Failed(ValueError()))
    assert not is_result((1, None))


def test_metadata_normalizes_headers():
    meta = ResponseMetadata(
        url="https://x.test", status_code=200, headers={"Content-Type": "Application/JSON; charset=utf-8"}
    )
    assert isinstance(meta.headers, httpx.Headers)
    assert meta.headers["content-type"].startswith("Application/JSON")
    assert meta.content_type == "application/json"
    assert meta.is_success


@pytest.mark.parametrize("status", [42, 1000])
def test_metadata_rejects_impossible_status(status):
    with pytest.raises(ValueError, match="status_code"):
        ResponseMetadata(url="https://x.test", status_code=status)


def test_metadata_accepts_nonstandard_three_digit_status():
    assert ResponseMetadata(url="https://x.test", status_code=600).status_code == 600


def test_metadata_from_response():
    request = httpx.Request("GET", "https://x.test/a")
    response = httpx.Response(
        503, headers={"retry-after": "5"}, content=b"{}", request=request
    )
    meta = ResponseMetadata.from_response(response)
    assert meta.url == "https://x.test/a"
    assert meta.status_code == 503
    assert meta.headers["retry-after"] == "5"
    assert not meta.is_success
    assert meta.content_type is None


def test_strict_reading_options_parse_containers():
    options = JSONReadingOptions()
    assert options.loads(b'{"a": [1, 2]}') == {"a": [1, 2]}
    assert options.loads(b"[]") == []


@pytest.mark.parametrize("document", [b'"text"', b"3", b"true", b"null"])
def test_fragments_rejected_unless_allowed(document):
    with pytest.raises(ValueError, match="allow_fragments"):
        JSONReadingOptions().loads(document)
    assert JSONReadingOptions(allow_fragments=True).loads(document) == json.loads(
        document
    )


def test_nan_rejected_unless_allowed():
    with pytest.raises(ValueError, match="NaN"):
        JSONReadingOptions().loads(b"[NaN]")
    [value] = JSONReadingOptions(allow_nan=True).loads(b"[NaN]")
    assert value != value


def test_malformed_documents_raise_value_error():
    for document in (b'{"a":', b"{'a': 1}", b"\xff\xfe\x00"):
        with pytest.raises(ValueError):
            JSONReadingOptions().loads(document)


def test_parse_hooks_are_forwarded():
    options = JSONReadingOptions(
        parse_float=Decimal, object_pairs_hook=OrderedDict
    )
    value = options.loads(b'{"b": 1.10, "a": 2}')
    assert isinstance(value, OrderedDict)
    assert list(value) == ["b", "a"]
    assert value["b"] == Decimal("1.10")


def test_utf16_bytes_are_detected():
    assert JSONReadingOptions().loads('{"k": "é"}'.encode("utf-16")) == {
        "k": "é"
    }


def test_explicit_encoding():
    options = JSONReadingOptions(encoding="latin-1")
    assert options.loads('{"k": "é"}'.encode("latin-1")) == {"k": "é"}
