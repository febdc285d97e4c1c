# -*- coding: utf-8 -*-
"""
Turns failure events into user notifications and operator log records.
"""

from typing import Awaitable, Callable, Optional

from utils import logging
from utils.chain import CausalChain, reduce
from utils.errors import ErrorPyException
from utils.events import (
    ArgumentParseFailed,
    CommandCheckFailed,
    CommandExecutionFailed,
    CommandPanicked,
    CommandStructureMismatch,
    CooldownHit,
    DmOnly,
    DynamicPrefixFailed,
    EventHandlerFailed,
    FailureEvent,
    GuildOnly,
    Level,
    LogRecord,
    MissingBotPermissions,
    MissingUserPermissions,
    NonCommandMessageFailed,
    Notification,
    NotAnOwner,
    NsfwOnly,
    Outcome,
    PermissionFetchFailed,
    SetupFailed,
    Severity,
    SubcommandRequired,
    Unclassified,
    UnknownCommand,
    UnknownInteraction,
)
from utils.format import bold, box, humanize_permissions, inline

MAYBE_BOT_ERROR_FOOTER = "If you believe this is an error on the bot's end, please contact a developer."
BOT_ERROR_FOOTER = "This isn't supposed to happen! If you have the time, please contact a developer."

DefaultHandler = Callable[[Unclassified], Awaitable[None]]


def _warning(title: str, body: str, footer: Optional[str] = None, **kwargs) -> Notification:
    return Notification(title=title, body=body, severity=Severity.WARNING, footer=footer, **kwargs)


def _danger(title: str, body: str, footer: Optional[str] = None) -> Notification:
    return Notification(title=title, body=body, severity=Severity.DANGER, footer=footer)


def _command_failed(event: CommandExecutionFailed) -> Outcome:
    invocation = event.invocation.invocation_string
    chain = reduce(event.chain)

    if chain.is_user_error:
        # only the root cause, unboxed, so the author's markdown survives
        return Outcome(
            _warning(
                "You seem to have made an error",
                chain.root,
                MAYBE_BOT_ERROR_FOOTER,
                allowed_mentions=False,
            ),
            LogRecord(Level.WARN, f"User made an error whilst executing {invocation!r}: {chain:#}"),
        )

    return Outcome(
        _danger("An internal error has occurred", box(f"{chain:?}"), BOT_ERROR_FOOTER),
        LogRecord(Level.ERROR, f"An error occurred whilst executing {invocation!r}: {chain:#}"),
    )


def _subcommand_required(event: SubcommandRequired) -> Outcome:
    invocation = event.invocation
    prefix = invocation.prefix

    lines = []
    for name in invocation.subcommands:
        if invocation.bot_mention is not None and prefix == invocation.bot_mention:
            lines.append(f"- {prefix} {inline(name)}")
        else:
            lines.append(f"- {inline(f'{prefix}{name}')}")

    return Outcome(
        _warning(
            "Subcommand required",
            "You must specify one of the following subcommands:\n\n" + "\n".join(lines),
        ),
        LogRecord(
            Level.WARN,
            "User attempted to invoke a command, which requires a subcommand, without a subcommand: "
            f"{invocation.invocation_string!r}",
        ),
    )


def _command_panicked(event: CommandPanicked) -> Outcome:
    return Outcome(
        _danger(
            "Panicked",
            "A really bad error happened and the bot panicked! "
            "You should contact a bot developer and tell them to check the logs.",
        ),
        LogRecord(Level.ERROR, f"Command panicked whilst executing {event.invocation.invocation_string!r}"),
    )


def _argument_parse_failed(event: ArgumentParseFailed) -> Outcome:
    invocation = event.invocation.invocation_string
    chain = reduce(event.chain)

    if event.input is not None:
        description = f"Failed to parse {event.input!r} from {invocation!r} into an argument: {chain}"
    else:
        description = f"Failed to parse an argument from {invocation!r}: {chain}"

    return Outcome(
        _warning("Failed to parse argument", description, MAYBE_BOT_ERROR_FOOTER),
        LogRecord(Level.WARN, description),
    )


def _command_structure_mismatch(event: CommandStructureMismatch) -> Outcome:
    return Outcome(
        _danger("Command structure mismatch", box(event.description), BOT_ERROR_FOOTER),
        LogRecord(
            Level.ERROR,
            f"Mismatch between registered command and local command for `/{event.invocation.command}`: "
            f"{event.description}",
        ),
    )


def _cooldown_hit(event: CooldownHit) -> Outcome:
    seconds = int(event.remaining.total_seconds())
    return Outcome(
        _warning(
            "Cooldown hit",
            f"You must wait {bold(f'~{seconds} seconds')} before you can use this command again.",
        ),
        LogRecord(Level.WARN, f"User hit cooldown with {event.invocation.invocation_string!r}"),
    )


def _missing_bot_permissions(event: MissingBotPermissions) -> Outcome:
    permissions = humanize_permissions(event.permissions)
    return Outcome(
        _warning(
            "Lacking bot permissions",
            f"The bot requires the following permissions to execute this command: {bold(permissions)}",
        ),
        LogRecord(
            Level.WARN,
            f"Bot is lacking permissions for {event.invocation.invocation_string!r}: {permissions}",
        ),
    )


def _missing_user_permissions(event: MissingUserPermissions) -> Outcome:
    invocation = event.invocation.invocation_string

    if not event.permissions:
        return Outcome(
            _warning(
                "Lacking user permissions",
                "You do not have the permissions needed to execute this command",
            ),
            LogRecord(Level.WARN, f"User is lacking permissions for {invocation!r}"),
        )

    permissions = humanize_permissions(event.permissions)
    return Outcome(
        _warning(
            "Lacking user permissions",
            f"You must have the following permissions to execute this command: {bold(permissions)}",
        ),
        LogRecord(Level.WARN, f"User is lacking permissions for {invocation!r}: {permissions}"),
    )


def _not_an_owner(event: NotAnOwner) -> Outcome:
    return Outcome(
        _warning("Owner only command", "You must be an owner to use this command."),
        LogRecord(Level.WARN, f"Non owner attempted to invoke {event.invocation.invocation_string!r}"),
    )


def _guild_only(event: GuildOnly) -> Outcome:
    return Outcome(
        _warning("Server only command", "You cannot use this command outside of a server."),
        LogRecord(
            Level.WARN,
            f"User attempted to invoke {event.invocation.invocation_string!r} outside of a guild",
        ),
    )


def _dm_only(event: DmOnly) -> Outcome:
    return Outcome(
        _warning("DMs only command", "You cannot use this command outside of DMs."),
        LogRecord(
            Level.WARN,
            f"User attempted to invoke {event.invocation.invocation_string!r} outside of DMs",
        ),
    )


def _nsfw_only(event: NsfwOnly) -> Outcome:
    return Outcome(
        _warning("NSFW command", "You cannot use this command outside of an NSFW channel."),
        LogRecord(
            Level.WARN,
            f"User attempted to invoke {event.invocation.invocation_string!r} outside of an NSFW channel",
        ),
    )


def _command_check_failed(event: CommandCheckFailed) -> Outcome:
    invocation = event.invocation.invocation_string

    # the check chose not to give a reason
    if event.chain is None:
        return Outcome(None, LogRecord(Level.WARN, f"Check failed for {invocation!r}"))

    chain = reduce(event.chain)
    return Outcome(
        _danger("Failed to perform check", box(f"{chain:?}"), BOT_ERROR_FOOTER),
        LogRecord(Level.ERROR, f"Check errored for {invocation!r}: {chain:#}"),
    )


def _dynamic_prefix_failed(event: DynamicPrefixFailed) -> Outcome:
    chain = reduce(event.chain)
    return Outcome(None, LogRecord(Level.ERROR, f"Dynamic prefix failed for a message: {chain:#}\n{event.message}"))


def _unknown_command(event: UnknownCommand) -> Outcome:
    return Outcome(
        None,
        LogRecord(
            Level.WARN,
            f"Recognized prefix {event.prefix!r} but did not recognize command {event.content!r}",
        ),
    )


def _unknown_interaction(event: UnknownInteraction) -> Outcome:
    return Outcome(None, LogRecord(Level.WARN, f"Received interaction for an unknown command: {event.name!r}"))


def _setup_failed(event: SetupFailed) -> Outcome:
    chain = reduce(event.chain)
    return Outcome(None, LogRecord(Level.ERROR, f"Failed to set up the bot: {chain:#}"))


def _event_handler_failed(event: EventHandlerFailed) -> Outcome:
    chain = reduce(event.chain)
    return Outcome(None, LogRecord(Level.ERROR, f"An error occurred in the {event.event!r} event handler: {chain:#}"))


def _permission_fetch_failed(event: PermissionFetchFailed) -> Outcome:
    return Outcome(
        _danger(
            "Failed to fetch permissions",
            "The bot attempted to fetch permissions for you or for the bot, but failed to do so.",
            BOT_ERROR_FOOTER,
        ),
        LogRecord(Level.ERROR, f"Failed to fetch permissions for {event.invocation.invocation_string!r}"),
    )


def _non_command_message_failed(event: NonCommandMessageFailed) -> Outcome:
    chain = reduce(event.chain)
    return Outcome(
        None,
        LogRecord(Level.ERROR, f"An error occurred in the non-command message callback: {chain:#}\n{event.message}"),
    )


HANDLERS: dict[type, Callable[..., Outcome]] = {
    CommandExecutionFailed: _command_failed,
    SubcommandRequired: _subcommand_required,
    CommandPanicked: _command_panicked,
    ArgumentParseFailed: _argument_parse_failed,
    CommandStructureMismatch: _command_structure_mismatch,
    CooldownHit: _cooldown_hit,
    MissingBotPermissions: _missing_bot_permissions,
    MissingUserPermissions: _missing_user_permissions,
    NotAnOwner: _not_an_owner,
    GuildOnly: _guild_only,
    DmOnly: _dm_only,
    NsfwOnly: _nsfw_only,
    CommandCheckFailed: _command_check_failed,
    DynamicPrefixFailed: _dynamic_prefix_failed,
    UnknownCommand: _unknown_command,
    UnknownInteraction: _unknown_interaction,
    SetupFailed: _setup_failed,
    EventHandlerFailed: _event_handler_failed,
    PermissionFetchFailed: _permission_fetch_failed,
    NonCommandMessageFailed: _non_command_message_failed,
}


def describe(event: FailureEvent) -> Outcome:
    """Map a failure event to the notification and log record it calls for.

    Unclassified events have no outcome of their own; they go to the default
    handler instead.
    """
    try:
        handler = HANDLERS[type(event)]
    except KeyError:
        raise TypeError(f"No handler for failure event {type(event).__name__}") from None
    return handler(event)


class Dispatcher:
    """Handles failure events for the bot.

    ``dispatch`` never raises: when a notification cannot be delivered, or the
    default handler fails, the failure is reduced and logged instead.
    """

    def __init__(self, log=None, default_handler: Optional[DefaultHandler] = None):
        self.log = log if log is not None else logging.get_logger("errorpy")
        self.default_handler = default_handler

    def record(self, record: LogRecord) -> None:
        self.log.log(int(record.level), record.message)

    async def try_dispatch(self, event: FailureEvent) -> None:
        """Like ``dispatch``, but lets failures while handling propagate."""
        if isinstance(event, Unclassified):
            await self._delegate(event)
            return

        outcome = describe(event)
        if outcome.notification is not None:
            try:
                await event.invocation.send(outcome.notification)
            except Exception as ex:
                raise ErrorPyException(outcome.record.message) from ex
        self.record(outcome.record)

    async def dispatch(self, event: FailureEvent) -> None:
        try:
            await self.try_dispatch(event)
        except Exception as ex:
            chain = reduce(CausalChain.from_exception(ex))
            self.record(LogRecord(Level.ERROR, f"Failed to handle error: {chain:#}"))

    async def _delegate(self, event: Unclassified) -> None:
        if self.default_handler is None:
            self.record(LogRecord(Level.ERROR, f"Unhandled error without a default handler: {event.value!r}"))
            return

        self.record(
            LogRecord(
                Level.WARN,
                "Not prepared to handle unfamiliar kind of error, falling back to the default handler",
            )
        )
        await self.default_handler(event)


async def on_error(event: FailureEvent, log=None) -> None:
    """Handle *event* with a one-off dispatcher."""
    await Dispatcher(log).dispatch(event)
