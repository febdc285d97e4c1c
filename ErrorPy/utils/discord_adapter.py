# -*- coding: utf-8 -*-
"""
Glue between discord.py and the dispatcher: turns discord.py errors into
failure events and delivers notifications as embeds.
"""

import re
from datetime import timedelta
from typing import Optional

from discord import AllowedMentions, Embed, Interaction, Message, app_commands
from discord.ext import commands
from discord.ext.commands import Context

from utils.chain import CausalChain
from utils.checks import MissingSubcommand, SilentCheckFailure
from utils.errors import PermissionFetchError
from utils.events import (
    ArgumentParseFailed,
    CommandCheckFailed,
    CommandExecutionFailed,
    CommandPanicked,
    CommandStructureMismatch,
    CooldownHit,
    DmOnly,
    FailureEvent,
    GuildOnly,
    Invocation,
    MessageInfo,
    MissingBotPermissions,
    MissingUserPermissions,
    NotAnOwner,
    Notification,
    NsfwOnly,
    PermissionFetchFailed,
    SubcommandRequired,
    Unclassified,
    UnknownCommand,
    UnknownInteraction,
)
from utils.format import truncate

# errors raised from a command that point at a bug rather than a failed operation
PANIC_EXCEPTIONS = (AssertionError, RecursionError, MemoryError, SystemError)

# what discord.py raises when a check predicate simply returned False
_BARE_CHECK_FAILURE = re.compile(r"^The (global )?check functions for command .+ failed\.$")


def build_embed(notification: Notification) -> Embed:
    emb = Embed(
        title=notification.title,
        description=truncate(notification.body),
        colour=notification.severity.colour,
    )
    if notification.footer is not None:
        emb.set_footer(text=notification.footer)
    return emb


class ContextSender:
    """Replies to a prefix or hybrid command invocation."""

    def __init__(self, ctx: Context):
        self.ctx = ctx

    async def __call__(self, notification: Notification) -> None:
        kwargs = {"embed": build_embed(notification), "ephemeral": notification.ephemeral}
        if notification.reply:
            kwargs["reference"] = self.ctx.message
            kwargs["mention_author"] = False
        if not notification.allowed_mentions:
            kwargs["allowed_mentions"] = AllowedMentions.none()
        await self.ctx.send(**kwargs)


class InteractionSender:
    """Responds to a slash command, following up if a response was already sent."""

    def __init__(self, interaction: Interaction):
        self.interaction = interaction

    async def __call__(self, notification: Notification) -> None:
        kwargs = {"embed": build_embed(notification), "ephemeral": notification.ephemeral}
        if not notification.allowed_mentions:
            kwargs["allowed_mentions"] = AllowedMentions.none()
        if not self.interaction.response.is_done():
            await self.interaction.response.send_message(**kwargs)
        else:
            await self.interaction.followup.send(**kwargs)


def invocation_from_context(ctx: Context) -> Invocation:
    command = ctx.command
    name = command.qualified_name if command is not None else (ctx.invoked_with or "")

    subcommands = ()
    if isinstance(command, commands.Group):
        # all_commands keeps declaration order but lists aliases too
        subcommands = tuple(dict.fromkeys(sub.qualified_name for sub in command.all_commands.values()))

    if ctx.interaction is not None:
        invocation_string = f"/{name}"
        prefix = "/"
    else:
        invocation_string = ctx.message.content
        prefix = ctx.prefix or ""

    return Invocation(
        command=name,
        invocation_string=invocation_string,
        prefix=prefix,
        bot_mention=ctx.me.mention if ctx.me is not None else None,
        channel=str(ctx.channel),
        subcommands=subcommands,
        sender=ContextSender(ctx),
    )


def invocation_from_interaction(interaction: Interaction) -> Invocation:
    command = interaction.command
    if command is not None:
        name = command.qualified_name
    else:
        name = (interaction.data or {}).get("name", "")

    return Invocation(
        command=name,
        invocation_string=f"/{name}",
        prefix="/",
        channel=str(interaction.channel),
        sender=InteractionSender(interaction),
    )


def message_info(message: Message) -> MessageInfo:
    return MessageInfo(author=str(message.author), channel=str(message.channel), content=message.content)


def _invoke_event(original: BaseException, invocation: Invocation) -> FailureEvent:
    if isinstance(original, PANIC_EXCEPTIONS):
        return CommandPanicked(invocation)
    if isinstance(original, PermissionFetchError):
        return PermissionFetchFailed(invocation)
    return CommandExecutionFailed(CausalChain.from_exception(original), invocation)


def _check_event(error: Exception, invocation: Invocation) -> FailureEvent:
    if isinstance(error, SilentCheckFailure) or _BARE_CHECK_FAILURE.match(str(error)):
        return CommandCheckFailed(invocation)
    return CommandCheckFailed(invocation, CausalChain.from_exception(error))


def event_from_command_error(ctx: Context, error: commands.CommandError) -> FailureEvent:
    """Translate an error from ``on_command_error`` into a failure event."""
    if isinstance(error, commands.CommandNotFound):
        return UnknownCommand(prefix=ctx.prefix or "", content=ctx.message.content)

    invocation = invocation_from_context(ctx)

    if isinstance(error, commands.HybridCommandError):
        return _app_command_event(invocation, error.original) or Unclassified((ctx, error))
    if isinstance(error, commands.CommandInvokeError):
        return _invoke_event(error.original, invocation)
    if isinstance(error, commands.UserInputError):
        argument = getattr(error, "argument", None)
        return ArgumentParseFailed(
            CausalChain.from_exception(error.original if isinstance(error, commands.ConversionError) else error),
            invocation,
            input=str(argument) if argument is not None else None,
        )
    if isinstance(error, commands.CommandOnCooldown):
        return CooldownHit(timedelta(seconds=error.retry_after), invocation)
    if isinstance(error, commands.BotMissingPermissions):
        return MissingBotPermissions(frozenset(error.missing_permissions), invocation)
    if isinstance(error, commands.MissingPermissions):
        return MissingUserPermissions(invocation, frozenset(error.missing_permissions))
    if isinstance(error, (commands.MissingRole, commands.MissingAnyRole)):
        return MissingUserPermissions(invocation)
    if isinstance(error, commands.NotOwner):
        return NotAnOwner(invocation)
    if isinstance(error, commands.NoPrivateMessage):
        return GuildOnly(invocation)
    if isinstance(error, commands.PrivateMessageOnly):
        return DmOnly(invocation)
    if isinstance(error, commands.NSFWChannelRequired):
        return NsfwOnly(invocation)
    if isinstance(error, MissingSubcommand):
        return SubcommandRequired(invocation)
    if isinstance(error, commands.CheckFailure):
        return _check_event(error, invocation)

    return Unclassified((ctx, error))


def event_from_app_command_error(interaction: Interaction, error: app_commands.AppCommandError) -> FailureEvent:
    """Translate an error from the command tree's ``on_error`` into a failure event."""
    if isinstance(error, app_commands.CommandNotFound):
        return UnknownInteraction(error.name)

    event = _app_command_event(invocation_from_interaction(interaction), error)
    return event or Unclassified((interaction, error))


def _app_command_event(invocation: Invocation, error: app_commands.AppCommandError) -> Optional[FailureEvent]:
    if isinstance(error, app_commands.CommandInvokeError):
        return _invoke_event(error.original, invocation)
    if isinstance(error, app_commands.TransformerError):
        return ArgumentParseFailed(CausalChain.from_exception(error), invocation, input=str(error.value))
    if isinstance(error, app_commands.CommandSignatureMismatch):
        return CommandStructureMismatch(str(error), invocation)
    if isinstance(error, app_commands.CommandOnCooldown):
        return CooldownHit(timedelta(seconds=error.retry_after), invocation)
    if isinstance(error, app_commands.BotMissingPermissions):
        return MissingBotPermissions(frozenset(error.missing_permissions), invocation)
    if isinstance(error, app_commands.MissingPermissions):
        return MissingUserPermissions(invocation, frozenset(error.missing_permissions))
    if isinstance(error, (app_commands.MissingRole, app_commands.MissingAnyRole)):
        return MissingUserPermissions(invocation)
    if isinstance(error, app_commands.NoPrivateMessage):
        return GuildOnly(invocation)
    if isinstance(error, app_commands.CheckFailure):
        return _check_event(error, invocation)

    return None
