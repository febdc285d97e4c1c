# -*- coding: utf-8 -*-
"""
Main Class of the ErrorPy bot
"""

import os
import sys
from asyncio import run
from pathlib import Path
from traceback import format_exc
from typing import Annotated, Awaitable, Callable, Optional

import typer

import yaml
from discord import ClientException, Intents, Interaction, LoginFailure, Message, app_commands
from discord.ext import commands
from discord.ext.commands import Bot, CommandError, Context, ExtensionError
from utils import logging
from utils.chain import CausalChain
from utils.discord_adapter import event_from_app_command_error, event_from_command_error, message_info
from utils.dispatcher import Dispatcher
from utils.errors import ErrorPyException
from utils.events import (
    DynamicPrefixFailed,
    EventHandlerFailed,
    NonCommandMessageFailed,
    SetupFailed,
    Unclassified,
)

DEFAULT_PREFIX = "!"
DEFAULT_MODULES = ["demo"]


class ErrorPyBot(Bot):
    """Discord Bot whose every failure goes through the dispatcher"""

    def __init__(self, config: dict, intents: Intents, debug: bool):
        bot_config = config["bot"]
        self.prefix = bot_config.get("prefix") or DEFAULT_PREFIX

        super().__init__(
            command_prefix=commands.when_mentioned_or(self.prefix),
            description="ErrorPy - Errors, but friendly.",
            intents=intents,
            owner_ids={int(op) for op in bot_config.get("ops", [])} or None,
        )

        self.config = config
        self.debug = debug
        self.token = bot_config.get("token")
        self.modules = bot_config.get("modules") or DEFAULT_MODULES
        self.log = logging.get_logger(config.get("logging", {}).get("logger", "errorpy"))
        self.dispatcher = Dispatcher(self.log, default_handler=self._fallback)
        self.message_handlers: list[Callable[[Message], Awaitable[None]]] = []

    async def setup_hook(self) -> None:
        """
        Discord Bot setup_hook
        Hooks up the command tree and loads modules
        """
        self.tree.on_error = self._on_app_command_error

        for module in self.modules:
            try:
                await self.load_extension(f"modules.{module}")
            except (ImportError, ExtensionError, ClientException) as ex:
                chain = CausalChain.from_exception(ex).context(f"failed to load extension {module}")
                await self.dispatcher.dispatch(SetupFailed(chain))

    async def get_prefix(self, message: Message):
        try:
            return await super().get_prefix(message)
        except Exception as ex:
            await self.dispatcher.dispatch(DynamicPrefixFailed(CausalChain.from_exception(ex), message_info(message)))
            return commands.when_mentioned(self, message)

    async def on_message(self, message: Message) -> None:
        """
        Runs commands, and hands every other message to the registered message handlers
        """
        if message.author.bot:
            return

        ctx = await self.get_context(message)
        if ctx.prefix is not None:
            await self.invoke(ctx)
            return

        for handler in self.message_handlers:
            try:
                await handler(message)
            except Exception as ex:
                await self.dispatcher.dispatch(
                    NonCommandMessageFailed(CausalChain.from_exception(ex), message_info(message))
                )

    async def on_command_error(self, ctx: Context, error: CommandError) -> None:
        """Handle errors from prefix and hybrid commands."""
        await self.dispatcher.dispatch(event_from_command_error(ctx, error))

    async def _on_app_command_error(self, interaction: Interaction, error: app_commands.AppCommandError) -> None:
        """Handle errors from slash commands."""
        await self.dispatcher.dispatch(event_from_app_command_error(interaction, error))

    async def on_error(self, event_method: str, /, *args, **kwargs) -> None:
        """Handle errors raised from event listeners."""
        error = sys.exc_info()[1]
        if error is None:
            error = ErrorPyException(f"{event_method} failed without an exception")
        await self.dispatcher.dispatch(EventHandlerFailed(CausalChain.from_exception(error), event_method))

    async def _fallback(self, event: Unclassified) -> None:
        """Let discord.py report errors the dispatcher does not know."""
        source, error = event.value
        if isinstance(source, Interaction):
            await app_commands.CommandTree.on_error(self.tree, source, error)
        else:
            await Bot.on_command_error(self, source, error)

    async def start(self, token: str = None, reconnect: bool = True) -> None:
        """
        connects the discord bot to the server

        :param token: str
        :param reconnect: bool
        """
        self.log.info("Logging into Discord...")
        if not self.token:
            self.log.critical("No credentials available to login.")
            raise ErrorPyException("No credentials available to login.")
        await super().start(self.token, reconnect=reconnect)


def get_intents() -> Intents:
    intents = Intents.default()
    intents.message_content = True
    return intents


def _csv(value: str) -> list[str]:
    return [x.strip() for x in value.split(",") if x.strip()]


def _set_nested(d: dict, keys: list[str], value) -> None:
    for key in keys[:-1]:
        d = d.setdefault(key, {})
    d[keys[-1]] = value


def parse_env_config() -> dict:
    """Read ERRORPY_* environment variables and return a config dict."""
    env: dict = {}
    mappings = [
        ("ERRORPY_TOKEN", ["bot", "token"], str),
        ("ERRORPY_PREFIX", ["bot", "prefix"], str),
        ("ERRORPY_OPS", ["bot", "ops"], _csv),
        ("ERRORPY_MODULES", ["bot", "modules"], _csv),
        ("ERRORPY_LOGGER", ["logging", "logger"], str),
    ]
    for var_name, keys, converter in mappings:
        value = os.environ.get(var_name)
        if value:
            _set_nested(env, keys, converter(value))
    return env


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base; override wins on conflicts."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def parse_config(config_path: Optional[Path] = None) -> dict:
    config = {}
    path = config_path or Path("./config.yaml")
    if path.exists():
        with open(path) as stream:
            try:
                config = yaml.safe_load(stream) or {}
            except yaml.YAMLError as exc:
                print(f"Error in configuration file: {exc}")
    return deep_merge(config, parse_env_config())


app = typer.Typer(add_completion=False)


@app.command()
def main(
    config: Annotated[Optional[Path], typer.Option("--config", "-c", help="Config file path")] = None,
    debug: Annotated[bool, typer.Option("--debug", "-d", help="Enable debug logging")] = False,
    loglevel: Annotated[str, typer.Option("--loglevel", "-l", help="Log level (DEBUG, INFO, WARNING, ERROR)")] = "INFO",
    verbosity: Annotated[int, typer.Option("--verbosity", "-v", help="Verbosity: 1=DEBUG, 2=+discord")] = 0,
) -> None:
    """ErrorPy - a Discord bot that explains its errors."""
    resolved_config = parse_config(config)
    if "bot" not in resolved_config:
        raise ErrorPyException("Bot config not found.")

    is_debug = debug or str(loglevel).upper() == "DEBUG" or verbosity > 0
    loggers = [resolved_config.get("logging", {}).get("logger", "errorpy")]
    if verbosity >= 2:
        loggers.append("discord")

    resolved_loglevel = "DEBUG" if (debug or verbosity > 0) else loglevel
    for logger_name in loggers:
        logging.create_logger(resolved_loglevel, logger_name)
    bot = ErrorPyBot(resolved_config, get_intents(), is_debug)

    try:
        run(bot.start())
    except LoginFailure:
        bot.log.error(format_exc())
        bot.log.error("Failed to login")
    except KeyboardInterrupt:
        bot.log.info("Received KeyboardInterrupt, shutting down.")


if __name__ == "__main__":
    app()
