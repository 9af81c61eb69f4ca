"""Turn chat text into factoid lookup keys."""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")

# IRC colour codes (\x03NN,MM) and other control characters.
_FORMATTING_RE = re.compile(r"\x03(?:\d{1,2}(?:,\d{1,2})?)?|[\x00-\x08\x0B-\x1F\x7F]")

_LETTER_OR_DIGIT_RE = re.compile(r"[^\W_]")

_EDGE_PUNCTUATION = " .,;:!?\"'`"


def normalize_key(text: str, relaxed: bool = False, nick: str | None = None) -> str:
    """Canonicalize message text into a factoid key.

    Lower-cases, removes chat formatting, collapses whitespace and trims
    punctuation from both ends. Keys made only of symbols (":)", "^_^")
    keep their punctuation.

    Args:
        text: Raw message text.
        relaxed: Also drop a trailing mention of the bot's own name. Used for
            lines that were not addressed to the bot, so "that's so cool, bot"
            finds "that's so cool".
        nick: The bot's own name, required for ``relaxed`` to have effect.

    Returns:
        The key. May be empty, which matches nothing.
    """
    key = _FORMATTING_RE.sub("", text)
    key = _WHITESPACE_RE.sub(" ", key).strip().lower()
    key = _trim_punctuation(key)
    if relaxed and nick:
        key = strip_self_name(key, nick)
    return key


def strip_self_name(key: str, nick: str) -> str:
    """Remove a trailing mention of ``nick`` from an already normalized key.

    Only whole-word mentions are removed: with nick "bot", "robot" is kept
    but "thanks, bot" becomes "thanks".
    """
    nick = nick.strip().lower()
    if not nick:
        return key
    if key == nick or key == f"@{nick}":
        return ""

    match = re.search(rf"[\s,:;]+@?{re.escape(nick)}$", key)
    if match is None:
        return key
    return _trim_punctuation(key[: match.start()].strip())


def _trim_punctuation(key: str) -> str:
    if not _LETTER_OR_DIGIT_RE.search(key):
        return key
    return key.strip(_EDGE_PUNCTUATION)
