"""Group channel backed by the connected network users."""

from typing import Callable, Iterable

from .base import Channel
from ..messages.localization import Localization
from ..users.network_user import NetworkUser


class NetworkChannel(Channel):
    """
    The shared group conversation of the server.

    Messages are queued on every member so the network layer can flush
    them on the next tick. Localized messages are rendered per member.
    """

    def __init__(self, members: Callable[[], Iterable[NetworkUser]]):
        self._members = members

    def speak(self, text: str) -> None:
        for user in self._members():
            user.speak_group(text)

    def speak_l(self, message_id: str, **kwargs) -> None:
        """Send a localized message to all members (each in their own locale)."""
        for user in self._members():
            user.speak_group(Localization.get(user.locale, message_id, **kwargs))
