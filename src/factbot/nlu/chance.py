"""Parse the chance expression of "chance of that is ..." commands."""

from __future__ import annotations

import re

from factbot.errors import BadChanceFormatError, ChanceOutOfRangeError

_PERCENT_RE = re.compile(r"^[+-]?\d+$")
_FRACTION_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


def parse_chance(expression: str) -> float:
    """Parse a recall chance.

    ``"N%"`` is an integer percentage. Anything else is read as a fraction,
    so a bare ``"50"`` means 50.0 and is rejected as out of range rather
    than being taken as a percentage.

    Args:
        expression: Chance as typed by the user.

    Returns:
        The chance, in (0.0, 1.0].

    Raises:
        BadChanceFormatError: If the expression is not a number.
        ChanceOutOfRangeError: If the number is <= 0 or > 1.
    """
    text = expression.strip()

    if text.endswith("%"):
        digits = text[:-1].strip()
        if not _PERCENT_RE.match(digits):
            raise BadChanceFormatError(text, percent=True)
        chance = int(digits) / 100
    else:
        if not _FRACTION_RE.match(text):
            raise BadChanceFormatError(text)
        chance = float(text)

    if chance <= 0.0 or chance > 1.0:
        raise ChanceOutOfRangeError(text)
    return chance
