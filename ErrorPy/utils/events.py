# -*- coding: utf-8 -*-
"""Failure events handed to the dispatcher and the notifications it produces."""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum, IntEnum
from typing import Any, Awaitable, Callable, Optional

from discord import Colour

from utils.chain import CausalChain


class Severity(Enum):
    WARNING = 0xFFC107
    DANGER = 0xDC3545

    @property
    def colour(self) -> Colour:
        return Colour(self.value)


class Level(IntEnum):
    WARN = logging.WARNING
    ERROR = logging.ERROR


@dataclass(frozen=True)
class Notification:
    title: str
    body: str
    severity: Severity
    footer: Optional[str] = None
    reply: bool = True
    ephemeral: bool = True
    allowed_mentions: bool = True


@dataclass(frozen=True)
class LogRecord:
    level: Level
    message: str


@dataclass(frozen=True)
class Outcome:
    notification: Optional[Notification]
    record: LogRecord


Sender = Callable[[Notification], Awaitable[Any]]


@dataclass(frozen=True)
class Invocation:
    """What the user invoked, and where to send the reply."""

    command: str
    invocation_string: str
    prefix: str = "/"
    bot_mention: Optional[str] = None
    channel: Optional[str] = None
    subcommands: tuple[str, ...] = ()
    sender: Optional[Sender] = field(default=None, compare=False, repr=False)

    async def send(self, notification: Notification) -> None:
        if self.sender is None:
            raise RuntimeError(f"No reply target for {self.invocation_string!r}")
        await self.sender(notification)


@dataclass(frozen=True)
class MessageInfo:
    author: str
    channel: str
    content: str


class FailureEvent:
    """Base of every failure kind the dispatcher knows about."""

    __slots__ = ()


@dataclass(frozen=True)
class CommandExecutionFailed(FailureEvent):
    chain: CausalChain
    invocation: Invocation


@dataclass(frozen=True)
class SubcommandRequired(FailureEvent):
    invocation: Invocation


@dataclass(frozen=True)
class CommandPanicked(FailureEvent):
    invocation: Invocation


@dataclass(frozen=True)
class ArgumentParseFailed(FailureEvent):
    chain: CausalChain
    invocation: Invocation
    input: Optional[str] = None


@dataclass(frozen=True)
class CommandStructureMismatch(FailureEvent):
    description: str
    invocation: Invocation


@dataclass(frozen=True)
class CooldownHit(FailureEvent):
    remaining: timedelta
    invocation: Invocation


@dataclass(frozen=True)
class MissingBotPermissions(FailureEvent):
    permissions: frozenset[str]
    invocation: Invocation


@dataclass(frozen=True)
class MissingUserPermissions(FailureEvent):
    invocation: Invocation
    permissions: Optional[frozenset[str]] = None


@dataclass(frozen=True)
class NotAnOwner(FailureEvent):
    invocation: Invocation


@dataclass(frozen=True)
class GuildOnly(FailureEvent):
    invocation: Invocation


@dataclass(frozen=True)
class DmOnly(FailureEvent):
    invocation: Invocation


@dataclass(frozen=True)
class NsfwOnly(FailureEvent):
    invocation: Invocation


@dataclass(frozen=True)
class CommandCheckFailed(FailureEvent):
    invocation: Invocation
    chain: Optional[CausalChain] = None


@dataclass(frozen=True)
class DynamicPrefixFailed(FailureEvent):
    chain: CausalChain
    message: MessageInfo


@dataclass(frozen=True)
class UnknownCommand(FailureEvent):
    prefix: str
    content: str


@dataclass(frozen=True)
class UnknownInteraction(FailureEvent):
    name: str


@dataclass(frozen=True)
class SetupFailed(FailureEvent):
    chain: CausalChain


@dataclass(frozen=True)
class EventHandlerFailed(FailureEvent):
    chain: CausalChain
    event: str


@dataclass(frozen=True)
class PermissionFetchFailed(FailureEvent):
    invocation: Invocation


@dataclass(frozen=True)
class NonCommandMessageFailed(FailureEvent):
    chain: CausalChain
    message: MessageInfo


@dataclass(frozen=True)
class Unclassified(FailureEvent):
    """Anything else, handed on to the default handler untouched."""

    value: Any
