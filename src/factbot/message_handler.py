"""Message handler: classifies chat lines and runs factoid commands.

Addressed lines are classified into add, delete, replace, set-chance,
literal or lookup; everything else is a lookup. Follow-up commands act on
the factoid focused in the same conversation scope.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable
from datetime import datetime

from factbot.errors import (
    CommandError,
    EmptyKeyError,
    EmptyValueError,
    NothingInFocusError,
    TooManyMatchesPublicError,
    UnknownKeyError,
)
from factbot.events import ChatMessage, MessageKind, Reply, Transport
from factbot.focus import FocusState
from factbot.formatter import FormatContext, TemplatePipeline, default_pipeline
from factbot.kb import (
    Factoid,
    FactoidNotFoundError,
    FactoidSelector,
    StoreError,
    StoreUnavailableError,
    SupportsFactoidStorage,
    parse_value,
)
from factbot.nlu import (
    CommandKind,
    ParsedCommand,
    classify_command,
    normalize_key,
    parse_chance,
    strip_self_name,
)

logger = logging.getLogger(__name__)

DEFAULT_LITERAL_PUBLIC_LIMIT = 10

_IS_DELIMITER_RE = re.compile(r":is", re.IGNORECASE)

_CommandHandler = Callable[[ChatMessage, ParsedCommand], Awaitable[None]]


class MessageHandler:
    """Runs the factoid command protocol for every incoming chat line.

    Coordinates:
    - command classification and key normalization
    - the factoid store (add, edit, delete, recall)
    - per-scope focus for "that"-style follow-up commands
    - template expansion of recalled values

    Edits are read-modify-write against the store; two edits racing on the
    same factoid may lose one of them.
    """

    def __init__(
        self,
        store: SupportsFactoidStorage,
        transport: Transport,
        nick: str = "",
        focus: FocusState | None = None,
        selector: FactoidSelector | None = None,
        pipeline: TemplatePipeline | None = None,
        literal_public_limit: int = DEFAULT_LITERAL_PUBLIC_LIMIT,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the handler.

        Args:
            store: Factoid persistence backend.
            transport: Chat connection used to send replies.
            nick: The bot's own name, used to recognize self-mentions.
            focus: Focus state; a fresh one is created if omitted.
            selector: Factoid selector; built on ``store`` if omitted.
            pipeline: Template pipeline for recalled values.
            literal_public_limit: Largest literal dump allowed in public.
            clock: Source of the current time for templates.
        """
        self.store = store
        self.transport = transport
        self.nick = nick
        self.focus = focus if focus is not None else FocusState()
        self.selector = selector or FactoidSelector(store)
        self.pipeline = pipeline or default_pipeline()
        self.literal_public_limit = literal_public_limit
        self._clock = clock
        self._handlers: dict[CommandKind, _CommandHandler] = {
            CommandKind.ADD: self._handle_add,
            CommandKind.DELETE: self._handle_delete,
            CommandKind.REPLACE: self._handle_replace,
            CommandKind.SET_CHANCE: self._handle_set_chance,
            CommandKind.LITERAL: self._handle_literal,
            CommandKind.LOOKUP: self._handle_lookup,
        }

    async def handle_message(self, message: ChatMessage) -> None:
        """Process one chat line.

        Lines not addressed to the bot are only ever looked up, so casual
        chatter can never change the knowledge base.

        Args:
            message: The incoming chat line.
        """
        if not message.text or not message.text.strip():
            return

        if message.addressed:
            command = classify_command(message.text)
        else:
            text = message.text.strip()
            command = ParsedCommand(kind=CommandKind.LOOKUP, text=text, argument=text)

        # Security: message content is only logged at DEBUG
        logger.debug(
            f"{command.kind.value} from {message.nick} in {message.scope}: "
            f"{message.text}"
        )

        try:
            await self._handlers[command.kind](message, command)
        except CommandError as e:
            logger.info(
                f"{command.kind.value} by {message.nick} rejected: {e.reply}"
            )
            await self._say(message, e.reply)
        except StoreError as e:
            if command.kind is CommandKind.LOOKUP and not message.addressed:
                logger.warning(f"Lookup failed in {message.scope}: {e}")
                return
            logger.warning(f"{command.kind.value} by {message.nick} failed: {e}")
            await self._say(message, f"Something went wrong: {e}")

    async def _say(self, message: ChatMessage, text: str) -> None:
        await self.transport.send(Reply(message.scope, f"{message.nick}: {text}"))

    async def _handle_add(self, message: ChatMessage, command: ParsedCommand) -> None:
        """Teach a factoid: ``key := value`` or ``key :is value``.

        The ``:is`` form stores "key is value" so the recall reads as a
        sentence.
        """
        text = command.text
        if ":=" in text:
            left, right = text.split(":=", 1)
            key = normalize_key(left)
            value = right.strip()
        else:
            left, right = _IS_DELIMITER_RE.split(text, maxsplit=1)
            key = normalize_key(left)
            value = f"{left.strip()} is {right.strip()}" if right.strip() else ""

        if not key:
            raise EmptyKeyError()
        try:
            factoid = Factoid.new(key, value, message.provenance())
        except ValueError as e:
            raise EmptyValueError(key) from e

        try:
            factoid_id = await self.store.insert(factoid)
        except StoreUnavailableError as e:
            logger.warning(f"Failed to add factoid '{key}': {e}")
            await self._say(message, f"Oh no! {e}.")
            return

        self.focus.set(message.scope, factoid_id)
        count = await self.store.count_by_key(key)
        logger.info(f"{message.nick} added factoid {factoid_id} for '{key}'")
        await self._say(message, f"Woo, I now know {count} things about '{key}'.")

    async def _focused_factoid(self, scope: str) -> Factoid:
        factoid_id = self.focus.get(scope)
        if factoid_id is None:
            raise NothingInFocusError()
        try:
            return await self.store.get_by_id(factoid_id)
        except FactoidNotFoundError as e:
            raise NothingInFocusError() from e

    async def _handle_delete(
        self, message: ChatMessage, command: ParsedCommand
    ) -> None:
        """Forget the focused factoid."""
        try:
            factoid = await self._focused_factoid(message.scope)
            try:
                await self.store.delete_by_id(factoid.id)
            except FactoidNotFoundError as e:
                raise NothingInFocusError() from e
            except StoreUnavailableError as e:
                logger.warning(f"Failed to delete factoid {factoid.id}: {e}")
                await self._say(message, f"I failed to forget '{factoid.key}': {e}")
                return

            logger.info(f"{message.nick} deleted factoid {factoid.id}")
            await self._say(
                message, f"I forgot that '{factoid.key}' was '{factoid.value}'."
            )
        finally:
            self.focus.clear(message.scope)

    async def _handle_replace(
        self, message: ChatMessage, command: ParsedCommand
    ) -> None:
        """Overwrite the value of the focused factoid."""
        try:
            factoid = await self._focused_factoid(message.scope)
            kind, value = parse_value(command.argument)
            if not value:
                raise EmptyValueError(factoid.key)

            old = factoid.value
            factoid.value = value
            factoid.kind = kind
            factoid.modify(message.provenance())
            await self._update_focused(
                message,
                factoid,
                f"'{factoid.key}' was '{old}', now is '{factoid.value}'.",
            )
        finally:
            self.focus.clear(message.scope)

    async def _handle_set_chance(
        self, message: ChatMessage, command: ParsedCommand
    ) -> None:
        """Change the recall chance of the focused factoid."""
        try:
            if self.focus.get(message.scope) is None:
                raise NothingInFocusError()
            chance = parse_chance(command.argument)
            factoid = await self._focused_factoid(message.scope)

            old = factoid.chance
            factoid.chance = chance
            factoid.modify(message.provenance())
            await self._update_focused(
                message,
                factoid,
                f"'{factoid.key}' was at {old * 100:.0f}% chance, "
                f"now is at {chance * 100:.0f}%.",
            )
        finally:
            self.focus.clear(message.scope)

    async def _update_focused(
        self, message: ChatMessage, factoid: Factoid, confirmation: str
    ) -> None:
        try:
            await self.store.update_by_id(factoid.id, factoid)
        except FactoidNotFoundError as e:
            raise NothingInFocusError() from e
        except StoreUnavailableError as e:
            logger.warning(f"Failed to update factoid {factoid.id}: {e}")
            await self._say(message, f"I failed to replace '{factoid.key}': {e}")
            return

        logger.info(f"{message.nick} edited factoid {factoid.id}")
        await self._say(message, confirmation)

    async def _handle_literal(
        self, message: ChatMessage, command: ParsedCommand
    ) -> None:
        """Dump every value stored under a key, unexpanded and ungated."""
        key = normalize_key(command.argument)
        count = await self.store.count_by_key(key)
        if count == 0:
            raise UnknownKeyError(key)
        if count > self.literal_public_limit and not message.private:
            raise TooManyMatchesPublicError(key, count)

        last_shown: Factoid | None = None
        self.transport.suspend_flood_control(message.scope)
        try:
            async for factoid in self.store.find_by_key(key):
                await self.transport.send(Reply(message.scope, factoid.value))
                last_shown = factoid
        finally:
            self.transport.resume_flood_control(message.scope)

        # "that" refers to the value shown last, right above the command.
        if last_shown is not None:
            self.focus.set(message.scope, last_shown.id)

    async def _handle_lookup(
        self, message: ChatMessage, command: ParsedCommand
    ) -> None:
        """Recall a factoid for the line, if one matches and passes its chance.

        Unaddressed statements drop a trailing mention of the bot's name.
        Actions keep it for the first try, since "/me pokes bot" may be a
        factoid on its own, and retry without it when nothing matched.
        """
        relaxed = not message.addressed and message.kind is MessageKind.STATEMENT
        key = normalize_key(command.text, relaxed=relaxed, nick=self.nick)

        factoid = await self.selector.pick(key)
        if factoid is None and message.kind is MessageKind.ACTION and self.nick:
            stripped = strip_self_name(key, self.nick)
            if stripped and stripped != key:
                factoid = await self.selector.pick(stripped)

        if factoid is None or not self.selector.passes_chance(factoid):
            return

        context = FormatContext(
            nick=message.nick,
            channel=message.scope_name or message.scope,
            now=self._clock(),
            addressed=message.addressed,
            bot_nick=self.nick,
        )
        text = self.pipeline.expand(factoid.value, context)
        await self.transport.send(
            Reply(message.scope, text, MessageKind(factoid.kind.value))
        )

        # The value was recalled, so it is focused even if bookkeeping fails.
        self.focus.set(message.scope, factoid.id)
        factoid.access(message.provenance())
        try:
            await self.store.update_by_id(factoid.id, factoid)
        except StoreError as e:
            logger.warning(f"Failed to record access of factoid {factoid.id}: {e}")
            if message.addressed:
                await self._say(message, f"I failed to update '{factoid.key}': {e}")
