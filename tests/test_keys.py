"""Tests for key normalization."""

import pytest

from factbot.nlu.keys import normalize_key, strip_self_name


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("foo", "foo"),
        ("  Foo   BAR  ", "foo bar"),
        ("foo?", "foo"),
        ("...foo!!", "foo"),
        ("'quoted'", "quoted"),
        ("what's up?", "what's up"),
        ("foo\tbar\nbaz", "foo bar baz"),
        ("\x02bold\x02 key", "bold key"),
        ("\x0304,01red\x03 key", "red key"),
        (":)", ":)"),
        ("^_^", "^_^"),
        ("", ""),
        ("   ", ""),
    ],
)
def test_normalize_key(text: str, expected: str):
    """Test canonicalizing message text into a key."""
    assert normalize_key(text) == expected


def test_normalize_key_idempotent():
    """Normalizing a key again leaves it unchanged."""
    for text in ["  Foo,  Bar?! ", ":-)", "\x02x\x02"]:
        once = normalize_key(text)
        assert normalize_key(once) == once


def test_relaxed_strips_trailing_nick():
    """Relaxed keys drop a trailing mention of the bot."""
    assert normalize_key("That's so cool, Bot!", relaxed=True, nick="bot") == (
        "that's so cool"
    )
    assert normalize_key("thanks @bot", relaxed=True, nick="bot") == "thanks"


def test_strict_keeps_trailing_nick():
    """Without relaxed, the nick is part of the key."""
    assert normalize_key("thanks, bot", nick="bot") == "thanks, bot"


def test_relaxed_without_nick_is_strict():
    """Relaxed has no effect when the bot's name is unknown."""
    assert normalize_key("thanks, bot", relaxed=True) == "thanks, bot"


@pytest.mark.parametrize(
    ("key", "expected"),
    [
        ("pokes bot", "pokes"),
        ("thanks, bot", "thanks"),
        ("robot", "robot"),
        ("bot", ""),
        ("@bot", ""),
        ("bot is great", "bot is great"),
    ],
)
def test_strip_self_name(key: str, expected: str):
    """Only whole-word trailing mentions are removed."""
    assert strip_self_name(key, "Bot") == expected


def test_strip_self_name_blank_nick():
    """A blank nick strips nothing."""
    assert strip_self_name("pokes bot", "  ") == "pokes bot"
