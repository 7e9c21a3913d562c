from __future__ import annotations

import pytest

from pixelpet.core.pet.matchers import REPLY_TRIGGERS, extract_user_name, match_triggers


@pytest.mark.parametrize(
    ("text", "name"),
    [
        ("My name is Alice", "Alice"),
        ("hi, i am Bob!", "Bob"),
        ("CALL ME Carol please", "Carol"),
        ("hello there", None),
    ],
)
def test_extract_user_name(text: str, name: str | None) -> None:
    assert extract_user_name(text) == name


def test_name_keeps_original_case() -> None:
    assert extract_user_name("my name is McGregor") == "McGregor"


def test_first_pattern_wins() -> None:
    assert extract_user_name("I am tired, my name is Dana") == "Dana"


def test_match_triggers_in_order() -> None:
    assert match_triggers("Are you tired of this game?") == ["play", "sleep"]
    assert match_triggers("How are you?") == ["status"]
    assert match_triggers("nothing relevant") == []


def test_trigger_table_is_ordered() -> None:
    assert [t.topic for t in REPLY_TRIGGERS] == ["name", "food", "play", "sleep", "status"]
