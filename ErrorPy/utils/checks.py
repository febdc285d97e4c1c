# -*- coding: utf-8 -*-

from discord import app_commands
from discord.ext import commands


class MissingSubcommand(commands.CheckFailure):
    """A group command was invoked without one of its subcommands."""

    pass


class SilentCheckFailure(commands.CheckFailure, app_commands.CheckFailure):
    """A check rejected the invocation without giving the user a reason."""

    pass
