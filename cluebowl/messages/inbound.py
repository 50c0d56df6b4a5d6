"""Inbound chat events handed to the game by the transport."""

from dataclasses import dataclass, field
from enum import Enum

from ..users.base import User

COMMAND_PREFIX = "!"


class ChannelType(Enum):
    """Where a chat message was posted."""

    DIRECT = "direct"  # Private conversation with the bot
    GROUP = "group"  # The shared game channel

    @classmethod
    def from_str(cls, value: object) -> "ChannelType | None":
        """Convert a wire convo name to enum, or None if it names neither conversation."""
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass
class InboundMessage:
    """One chat message, with mentions already resolved to users."""

    author: User
    channel_type: ChannelType
    text: str
    mentions: list[User] = field(default_factory=list)

    @property
    def is_direct(self) -> bool:
        return self.channel_type is ChannelType.DIRECT

    @property
    def is_command(self) -> bool:
        return self.text.startswith(COMMAND_PREFIX)

    @property
    def command(self) -> str:
        """The first word of the message, e.g. ``!add-clue``."""
        parts = self.text.split(maxsplit=1)
        return parts[0] if parts else ""

    @property
    def args(self) -> str:
        """Everything after the command word, stripped."""
        parts = self.text.split(maxsplit=1)
        return parts[1].strip() if len(parts) > 1 else ""
