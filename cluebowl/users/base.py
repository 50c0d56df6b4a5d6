"""Abstract User class that the game interacts with."""

from abc import ABC, abstractmethod
import uuid as uuid_module

from ..messages.localization import Localization


class User(ABC):
    """
    Abstract base class for chat participants.

    The game interacts with this interface, never with network code directly.
    Implementations include NetworkUser (real players) and MockUser (tests).
    Anything sent through speak() is a direct, private message to this user.
    """

    @property
    @abstractmethod
    def uuid(self) -> str:
        """The user's unique identifier (UUID string)."""
        ...

    @property
    @abstractmethod
    def username(self) -> str:
        """The user's display name."""
        ...

    @property
    @abstractmethod
    def locale(self) -> str:
        """The user's locale for localization (e.g., 'en', 'es')."""
        ...

    @property
    def mention(self) -> str:
        """How this user is referred to in group messages."""
        return f"@{self.username}"

    @abstractmethod
    def speak(self, text: str) -> None:
        """
        Send a direct message to this user.

        Args:
            text: The message text.
        """
        ...

    def speak_l(self, message_id: str, **kwargs) -> None:
        """
        Send a localized direct message to this user.

        Args:
            message_id: The message ID from the .ftl file.
            **kwargs: Variables to substitute into the message.
        """
        text = Localization.get(self.locale, message_id, **kwargs)
        self.speak(text)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return self.uuid == other.uuid

    def __hash__(self) -> int:
        return hash(self.uuid)


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid_module.uuid4())
