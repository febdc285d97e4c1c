# -*- coding: utf-8 -*-

from typing import Literal

from discord.ext.commands import (
    BucketType,
    Cog,
    Context,
    command,
    cooldown,
    dm_only,
    group,
    guild_only,
    hybrid_command,
    is_owner,
)

from utils.checks import MissingSubcommand
from utils.errors import UserError

MAX_NAME_LENGTH = 32


class Demo(Cog):
    """commands that fail on purpose, to show off the error messages"""

    def __init__(self, bot):
        bot.log.info(f"loaded {__name__}")

        self.bot = bot

    @hybrid_command(name="error")
    async def _error(self, ctx: Context, kind: Literal["user", "internal", "panic"]):
        """Fails intentionally"""
        if kind == "user":
            try:
                raise ValueError("This is an example of a user error")
            except ValueError as ex:
                raise UserError("This is an example of extra context") from ex
        elif kind == "internal":
            try:
                raise ValueError("This is an example of an internal error")
            except ValueError as ex:
                raise RuntimeError("This is an example of extra context") from ex
        else:
            raise AssertionError("This is an example of a panic")

    @command(name="rename")
    @cooldown(1, 60, BucketType.user)
    async def _rename(self, ctx: Context, *, name: str):
        """Pretends to rename you"""
        if len(name) > MAX_NAME_LENGTH:
            raise UserError(f"Name too long, keep it under **{MAX_NAME_LENGTH}** characters")
        await ctx.send(f"You shall now be known as {name}.")

    @group(name="settings", invoke_without_command=True)
    async def _settings(self, ctx: Context):
        """Manage your settings"""
        raise MissingSubcommand()

    @_settings.command(name="show")
    async def _settings_show(self, ctx: Context):
        """Show your settings"""
        await ctx.send("Nothing to show yet.")

    @_settings.command(name="reset")
    async def _settings_reset(self, ctx: Context):
        """Reset your settings"""
        await ctx.send("Your settings are reset.")

    @command(name="server")
    @guild_only()
    async def _server(self, ctx: Context):
        """Only works in a server"""
        await ctx.send(f"You are in {ctx.guild.name}.")

    @command(name="whisper")
    @dm_only()
    async def _whisper(self, ctx: Context):
        """Only works in DMs"""
        await ctx.send("Psst.")

    @command(name="shutdown")
    @is_owner()
    async def _shutdown(self, ctx: Context):
        """Shuts the bot down [bot-owner]"""
        await ctx.send("Shutting down.")
        await self.bot.close()


async def setup(bot):
    """adds this module to the bot"""
    await bot.add_cog(Demo(bot))
