# -*- coding: utf-8 -*-
"""Shared pytest fixtures for ErrorPy test suite"""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add ErrorPy to path so we can import utils and modules
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent.parent / "ErrorPy"))

from utils.chain import CausalChain, Cause
from utils.events import Invocation


@pytest.fixture
def mock_log():
    """Mock logger standing in for the dispatcher's log collaborator."""
    log = MagicMock()
    log.log = MagicMock()
    log.info = MagicMock()
    log.debug = MagicMock()
    log.warning = MagicMock()
    log.error = MagicMock()
    return log


@pytest.fixture
def sender():
    """Sender that accepts every notification."""
    return AsyncMock()


@pytest.fixture
def failing_sender():
    """Sender whose delivery always fails, like an expired interaction."""
    return AsyncMock(side_effect=ConnectionError("Unknown interaction"))


@pytest.fixture
def invocation(sender):
    return Invocation(
        command="draw",
        invocation_string="/draw",
        prefix="/",
        channel="general",
        sender=sender,
    )


@pytest.fixture
def internal_chain():
    return CausalChain(["Failed to draw a card", "Deck is empty"])


@pytest.fixture
def user_chain():
    return CausalChain(["Name too long"], Cause.USER)


@pytest.fixture
def mock_bot(mock_log):
    """Create a mock bot carrying a logger."""
    bot = MagicMock()
    bot.log = mock_log
    bot.close = AsyncMock()
    return bot


@pytest.fixture
def mock_member():
    """Create a mock discord.Member."""
    member = MagicMock()
    member.id = 123456789
    member.name = "TestUser"
    member.mention = "<@123456789>"
    member.bot = False
    return member


@pytest.fixture
def mock_channel():
    """Create a mock discord.TextChannel."""
    channel = MagicMock()
    channel.id = 111222333
    channel.name = "test-channel"
    channel.__str__.return_value = "test-channel"
    channel.send = AsyncMock()
    return channel


@pytest.fixture
def mock_message(mock_member, mock_channel):
    """Create a mock discord.Message."""
    message = MagicMock()
    message.id = 444555666
    message.author = mock_member
    message.channel = mock_channel
    message.content = "!rename Bob"
    return message


@pytest.fixture
def mock_context(mock_bot, mock_member, mock_channel, mock_message):
    """Create a mock discord Context for a prefix command invocation."""
    ctx = MagicMock()
    ctx.bot = mock_bot
    ctx.author = mock_member
    ctx.channel = mock_channel
    ctx.message = mock_message
    ctx.prefix = "!"
    ctx.invoked_with = "rename"
    ctx.command = MagicMock()
    ctx.command.qualified_name = "rename"
    ctx.interaction = None
    ctx.me = MagicMock()
    ctx.me.mention = "<@987654321>"
    ctx.send = AsyncMock()
    return ctx


@pytest.fixture
def mock_interaction(mock_bot, mock_member, mock_channel):
    """Create a mock discord Interaction for slash command testing."""
    interaction = MagicMock()
    interaction.client = mock_bot
    interaction.user = mock_member
    interaction.channel = mock_channel
    interaction.response = MagicMock()
    interaction.response.send_message = AsyncMock()
    interaction.response.is_done = MagicMock(return_value=False)
    interaction.followup = MagicMock()
    interaction.followup.send = AsyncMock()
    interaction.command = MagicMock()
    interaction.command.qualified_name = "draw"
    return interaction
