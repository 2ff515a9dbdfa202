import pytest

from services.specgen.app.domain.parsing import JsonExtractionError, parse_first_json_object


def test_extracts_object_wrapped_in_prose_and_fences():
    text = 'Sure!\n```json\n{"tasks": [{"name": "a", "meta": {"x": 1}}]}\n```\nDone.'

    assert parse_first_json_object(text) == {"tasks": [{"name": "a", "meta": {"x": 1}}]}


def test_span_is_greedy_from_first_to_last_brace():
    # two separate objects are not a valid single document
    with pytest.raises(JsonExtractionError):
        parse_first_json_object('{"a": 1} and then {"b": 2}')


def test_no_object_raises_with_preview():
    with pytest.raises(JsonExtractionError) as excinfo:
        parse_first_json_object("I cannot help with that.")

    assert excinfo.value.preview == "I cannot help with that."


def test_invalid_json_preview_is_bounded():
    text = "{" + "x" * 1000 + "}"

    with pytest.raises(JsonExtractionError) as excinfo:
        parse_first_json_object(text, preview_chars=20)

    assert len(excinfo.value.preview) == 20
    assert isinstance(excinfo.value, ValueError)


def test_empty_text_raises():
    with pytest.raises(JsonExtractionError):
        parse_first_json_object("")
