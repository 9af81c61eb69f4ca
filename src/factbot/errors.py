"""User-facing command errors.

Each error carries the text the bot says back to the person who issued the
command. They are raised by command handlers and turned into replies by the
message handler; none of them is fatal.
"""


class CommandError(Exception):
    """A command could not be carried out because of its input or state."""

    def __init__(self, reply: str) -> None:
        super().__init__(reply)
        self.reply = reply


class EmptyKeyError(CommandError, ValueError):
    """An add command had nothing before its delimiter."""

    def __init__(self) -> None:
        super().__init__("I can't learn something about nothing.")


class EmptyValueError(CommandError, ValueError):
    """An add command had nothing after its delimiter."""

    def __init__(self, key: str) -> None:
        super().__init__(f"What should I know about '{key}'?")
        self.key = key


class NothingInFocusError(CommandError):
    """A follow-up command referred to "that" but nothing is focused."""

    def __init__(self) -> None:
        super().__init__("Whatever that was, I've already forgotten it.")


class BadChanceFormatError(CommandError, ValueError):
    """A chance expression could not be parsed."""

    def __init__(self, expression: str, percent: bool = False) -> None:
        if percent:
            reply = f"'{expression}' didn't look like a % chance to me."
        else:
            reply = f"'{expression}' didn't look like a chance to me."
        super().__init__(reply)
        self.expression = expression


class ChanceOutOfRangeError(CommandError, ValueError):
    """A parsed chance was not in (0, 1]."""

    def __init__(self, expression: str) -> None:
        super().__init__(f"'{expression}' was outside possible chance ranges.")
        self.expression = expression


class UnknownKeyError(CommandError, LookupError):
    """A literal dump was requested for a key with no factoids."""

    def __init__(self, key: str) -> None:
        super().__init__(f"I don't know anything about '{key}'.")
        self.key = key


class TooManyMatchesPublicError(CommandError):
    """A literal dump would flood a public conversation."""

    def __init__(self, key: str, count: int) -> None:
        super().__init__(f"I know too much about '{key}', ask me privately.")
        self.key = key
        self.count = count
