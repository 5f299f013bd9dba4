import json

import pytest

from wanderlust.core.state import SectionName
from wanderlust.utils.sections import decode_json_section, split_sections, strip_code_fences


def test_split_without_delimiter_yields_all_empty_sections():
    sections = split_sections("ITINERARY---Day 1\nNo delimiters anywhere here.")
    assert set(sections) == set(SectionName)
    assert all(value == "" for value in sections.values())


def test_split_isolates_adjacent_sections():
    raw = "preface ---SECTION: BUDGET---[1,2]---SECTION: PACKING---[]---SECTION: NIGHTLIFE---  Bars  "
    sections = split_sections(raw)
    assert sections[SectionName.BUDGET] == "[1,2]"
    assert sections[SectionName.PACKING] == "[]"
    assert sections[SectionName.NIGHTLIFE] == "Bars"
    assert sections[SectionName.ITINERARY] == ""


def test_split_first_duplicate_wins_and_unknown_names_are_dropped():
    raw = (
        "---SECTION: TRANSPORT---Metro---SECTION: MYSTERY---ignored"
        "---SECTION: TRANSPORT---Taxi"
    )
    sections = split_sections(raw)
    assert sections[SectionName.TRANSPORT] == "Metro"
    assert "ignored" not in sections.values()


def test_split_requires_terminator_after_name():
    sections = split_sections("---SECTION: BUDGET: [1]")
    assert sections[SectionName.BUDGET] == ""


def test_split_handles_empty_input():
    assert all(value == "" for value in split_sections("").values())
    assert all(value == "" for value in split_sections(None).values())


def test_strip_code_fences():
    assert strip_code_fences("```json\n[1]\n```") == "[1]"
    assert strip_code_fences("```\n{}\n```  ") == "{}"


@pytest.mark.parametrize("value", [[], [1, 2], [{"category": "Hotel", "amount": 500, "currency": "USD"}]])
def test_decode_fenced_json_array(value):
    text = "```json\n" + json.dumps(value) + "\n```"
    assert decode_json_section(text, ["fallback"]) == value


@pytest.mark.parametrize("text", ["not json", "[1, 2", "{'single': 'quotes'}", "```json\n[oops]\n```"])
def test_decode_returns_fallback_for_unparseable_text(text):
    fallback = [{"category": "Estimated Total"}]
    assert decode_json_section(text, fallback) is fallback


def test_decode_empty_section_returns_fallback():
    fallback = []
    assert decode_json_section("  ```json ```  ", fallback) is fallback


def test_decode_wrong_top_level_type_returns_fallback():
    assert decode_json_section('{"category": "Hotel"}', []) == []


def test_decode_without_fallback_type_accepts_any_json():
    assert decode_json_section('{"a": 1}', None) == {"a": 1}


def test_decode_non_list_fallback_accepts_any_json_value():
    assert decode_json_section("1.5", 0) == 1.5
    assert decode_json_section("[1]", {}) == [1]
