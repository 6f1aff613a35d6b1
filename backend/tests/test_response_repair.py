from __future__ import annotations

import json

import pytest

from app.core.errors import ResponseParseError
from app.services.response_repair import last_complete_object_end, repair_json_object


def test_well_formed_object_matches_direct_parse() -> None:
    text = '{"phases": [{"title": "A"}, {"title": "B"}], "note": "x"}'
    assert repair_json_object(text) == json.loads(text)


def test_surrounding_whitespace_is_ignored() -> None:
    assert repair_json_object('\n   {"a": 1}  \n') == {"a": 1}


def test_prose_around_object_is_sliced_away() -> None:
    text = 'Sure! Here is your plan:\n{"overview": "ok", "stage_count": 6}\nGood luck.'
    assert repair_json_object(text) == {"overview": "ok", "stage_count": 6}


def test_truncated_tail_keeps_last_complete_object() -> None:
    text = '{"a": 1}\n{"b": {"c": 2'
    assert repair_json_object(text) == {"a": 1}


def test_unbalanced_object_is_a_parse_failure() -> None:
    with pytest.raises(ResponseParseError):
        repair_json_object('{"a":1,"b":{"c":2}')


def test_braces_inside_strings_do_not_confuse_the_scan() -> None:
    text = '{"title": "Use } and { freely", "ok": true} trailing {"cut'
    assert repair_json_object(text) == {"title": "Use } and { freely", "ok": True}


def test_escaped_quotes_inside_strings() -> None:
    text = '{"quote": "she said \\"hi {\\"", "n": 2} {'
    assert repair_json_object(text) == {"quote": 'she said "hi {"', "n": 2}


@pytest.mark.parametrize("text", ["", "   ", "no json here", "[1, 2, 3]", '"just a string"', "{{{"])
def test_unrecoverable_text_raises(text: str) -> None:
    with pytest.raises(ResponseParseError):
        repair_json_object(text)


def test_parse_error_carries_preview() -> None:
    with pytest.raises(ResponseParseError) as excinfo:
        repair_json_object("{" + "x" * 500)
    assert excinfo.value.preview.startswith("{xxx")
    assert len(excinfo.value.preview) == 200


def test_last_complete_object_end_ignores_unclosed_outer_object() -> None:
    assert last_complete_object_end('{"a":1,"b":{"c":2}') is None
    assert last_complete_object_end('{"a":1} {"b":') == 6
