import pytest

from app.core.exceptions import MalformedAIResponseError
from app.core.sanitizer import extract_json, strip_code_fence


def test_extracts_object_wrapped_in_prose():
    raw = 'Here is the analysis you asked for: {"a": 1, "b": {"c": [1, 2]}} Let me know!'
    assert extract_json(raw, "object") == {"a": 1, "b": {"c": [1, 2]}}


def test_extracts_array_from_code_fence():
    raw = '```json\n[{"id": "leg1"}, {"id": "leg2"}]\n```'
    assert extract_json(strip_code_fence(raw), "array") == [{"id": "leg1"}, {"id": "leg2"}]


def test_strip_code_fence_leaves_plain_text_alone():
    assert strip_code_fence('  {"a": 1}  ') == '{"a": 1}'
    assert strip_code_fence(None) == ""


def test_no_braces_raises_malformed():
    with pytest.raises(MalformedAIResponseError) as exc:
        extract_json("I'm sorry, I cannot help with that.", "object")
    assert exc.value.status_code == 500
    assert exc.value.code == "malformed_ai_response"


def test_unparseable_slice_raises_malformed():
    with pytest.raises(MalformedAIResponseError):
        extract_json('{"a": 1,, }', "object")


def test_array_requested_but_object_found():
    # "[1]" sits inside the object, so the slice is "[1]" and parses as a list
    assert extract_json('{"a": [1]}', "array") == [1]
    with pytest.raises(MalformedAIResponseError):
        extract_json('{"a": 1}', "array")


def test_closing_before_opening_is_malformed():
    with pytest.raises(MalformedAIResponseError):
        extract_json("} nothing here {", "object")


def test_unknown_shape_is_a_programming_error():
    with pytest.raises(ValueError):
        extract_json("{}", "tuple")
