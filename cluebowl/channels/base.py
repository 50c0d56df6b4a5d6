"""Abstract Channel class the game broadcasts to."""

from abc import ABC, abstractmethod

from ..messages.localization import Localization


class Channel(ABC):
    """
    A group conversation that every participant can read.

    The game only ever broadcasts to a channel; who is listening is the
    transport's concern.
    """

    @property
    def locale(self) -> str:
        """Locale used when rendering messages for the whole channel."""
        return "en"

    @abstractmethod
    def speak(self, text: str) -> None:
        """Broadcast a message to everyone in the channel."""
        ...

    def speak_l(self, message_id: str, **kwargs) -> None:
        """Broadcast a localized message to everyone in the channel."""
        self.speak(Localization.get(self.locale, message_id, **kwargs))
