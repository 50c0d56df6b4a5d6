"""Network user implementation for real players."""

from typing import Any, TYPE_CHECKING

from .base import User, generate_uuid

if TYPE_CHECKING:
    from ..network.websocket_server import ClientConnection


class NetworkUser(User):
    """
    Network implementation of User for players connected via websocket.

    Queues messages to be sent asynchronously by the network layer.
    """

    def __init__(
        self,
        username: str,
        locale: str,
        connection: "ClientConnection",
        uuid: str | None = None,
    ):
        self._uuid = uuid or generate_uuid()
        self._username = username
        self._locale = locale
        self._connection = connection
        self._message_queue: list[dict[str, Any]] = []

    @property
    def uuid(self) -> str:
        return self._uuid

    @property
    def username(self) -> str:
        return self._username

    @property
    def locale(self) -> str:
        return self._locale

    def set_locale(self, locale: str) -> None:
        """Set the user's locale."""
        self._locale = locale

    @property
    def connection(self) -> "ClientConnection":
        return self._connection

    def set_connection(self, connection: "ClientConnection") -> None:
        """Point this user at a new connection after a reconnect."""
        self._connection = connection

    def _queue_packet(self, packet: dict[str, Any]) -> None:
        """Queue a packet to be sent to the client."""
        self._message_queue.append(packet)

    def get_queued_messages(self) -> list[dict[str, Any]]:
        """Get and clear the message queue."""
        messages = self._message_queue
        self._message_queue = []
        return messages

    def speak(self, text: str) -> None:
        self._queue_packet({"type": "speak", "convo": "direct", "text": text})

    def speak_group(self, text: str) -> None:
        """Queue a group-channel message for delivery to this user."""
        self._queue_packet({"type": "speak", "convo": "group", "text": text})
