"""The Clue Bowl chat server: websocket clients in, one game session behind them."""

import asyncio
import logging
import re
from pathlib import Path

from .tick import TickScheduler
from .. import VERSION
from ..channels.network_channel import NetworkChannel
from ..commands.dispatcher import CommandDispatcher
from ..game.session import DEFAULT_TURN_DURATION_MS, GameSession
from ..messages.inbound import ChannelType, InboundMessage
from ..messages.localization import Localization
from ..network.websocket_server import WebSocketServer, ClientConnection
from ..users.network_user import NetworkUser

logger = logging.getLogger(__name__)

_MENTION_RE = re.compile(r"@([\w.\-]+)")


class Server:
    """
    Clue bowl chat server.

    Coordinates the network layer, the connected users, the group channel
    and the one game session. Everything runs on a single event loop, so
    inbound messages and ticks never interleave.
    """

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 8000,
        locales_dir: str | Path | None = None,
        ssl_cert: str | Path | None = None,
        ssl_key: str | Path | None = None,
        turn_duration_ms: int = DEFAULT_TURN_DURATION_MS,
    ):
        self.host = host
        self.port = port
        self._ssl_cert = ssl_cert
        self._ssl_key = ssl_key
        self._ws_server: WebSocketServer | None = None
        self._tick_scheduler: TickScheduler | None = None

        # User tracking (kept across disconnects so game identity survives a reconnect)
        self._users: dict[str, NetworkUser] = {}  # username -> NetworkUser

        self._channel = NetworkChannel(self._online_users)
        self._session = GameSession(turn_duration_ms=turn_duration_ms)
        self._dispatcher = CommandDispatcher(self._session, self._channel)
        # In-flight sends, held until done so the event loop can't drop them
        self._send_tasks: set[asyncio.Task] = set()

        Localization.init(locales_dir)
        Localization.preload_bundles()

    @property
    def session(self) -> GameSession:
        return self._session

    async def start(self) -> None:
        """Open the websocket listener and start ticking."""
        print(f"Starting Clue Bowl v{VERSION} server...")

        self._ws_server = WebSocketServer(
            host=self.host,
            port=self.port,
            on_connect=self._on_client_connect,
            on_disconnect=self._on_client_disconnect,
            on_message=self._on_client_message,
            ssl_cert=self._ssl_cert,
            ssl_key=self._ssl_key,
        )
        await self._ws_server.start()

        self._tick_scheduler = TickScheduler(self._on_tick)
        await self._tick_scheduler.start()

        print(f"Server running on {self._ws_server.url}")

    async def stop(self) -> None:
        """Stop ticking, then close the listener and every connection."""
        print("Stopping server...")

        if self._tick_scheduler:
            await self._tick_scheduler.stop()

        if self._send_tasks:
            await asyncio.gather(*self._send_tasks, return_exceptions=True)

        if self._ws_server:
            await self._ws_server.stop()

        print("Server stopped.")

    def _online_users(self) -> list[NetworkUser]:
        """Users with a live, authenticated connection."""
        return [
            user
            for user in self._users.values()
            if user.connection.authenticated and self._is_connected(user)
        ]

    def _is_connected(self, user: NetworkUser) -> bool:
        if self._ws_server is None:
            return True
        return self._ws_server.get_client_by_username(user.username) is user.connection

    def _on_tick(self) -> None:
        """Advance the turn timer, then deliver whatever the game said."""
        self._session.on_tick()
        self._flush_user_messages()

    def _flush_user_messages(self) -> None:
        """Send every user's queued packets to their live connection, in order."""
        if self._ws_server is None:
            return
        for username, user in self._users.items():
            client = self._ws_server.get_client_by_username(username)
            if client is None:
                # Offline users miss whatever was said while they were away
                user.get_queued_messages()
                continue
            packets = user.get_queued_messages()
            if packets:
                task = asyncio.create_task(client.send_many(packets))
                self._send_tasks.add(task)
                task.add_done_callback(self._send_tasks.discard)

    async def _on_client_connect(self, client: ClientConnection) -> None:
        logger.info("Client connected: %s", client.address)

    async def _on_client_disconnect(self, client: ClientConnection) -> None:
        logger.info("Client disconnected: %s (%s)", client.address, client.username)

    async def _on_client_message(self, client: ClientConnection, packet: dict) -> None:
        """Route one decoded packet; only authorize is accepted before login."""
        packet_type = packet.get("type")

        if packet_type == "authorize":
            await self._handle_authorize(client, packet)
        elif not client.authenticated:
            logger.debug("Dropping %s from unauthenticated %s", packet_type, client.address)
            return
        elif packet_type == "chat":
            await self._handle_chat(client, packet)
        elif packet_type == "ping":
            await self._handle_ping(client)

    async def _handle_authorize(self, client: ClientConnection, packet: dict) -> None:
        """Log a client in by username, reusing the game identity of an earlier login."""
        username = str(packet.get("username", "")).strip()
        locale = str(packet.get("locale", "en"))
        if locale not in Localization.available_locales():
            logger.debug("No messages for locale %r, using en", locale)
            locale = "en"

        if not username or not _MENTION_RE.fullmatch(f"@{username}"):
            await client.send(
                {
                    "type": "disconnect",
                    "reason": "Invalid username",
                    "reconnect": False,
                }
            )
            await client.close()
            return

        client.username = username
        client.authenticated = True

        user = self._users.get(username)
        if user is None:
            user = NetworkUser(username, locale, client)
            self._users[username] = user
        else:
            user.set_connection(client)
            user.set_locale(locale)
        logger.info("User %s authorized from %s", username, client.address)

        await client.send(
            {
                "type": "authorize_success",
                "username": username,
                "version": VERSION,
            }
        )

    def _resolve_mentions(self, packet: dict, text: str) -> list[NetworkUser]:
        """Map explicit mentions and @name tokens to known users, in order."""
        names = [str(n) for n in packet.get("mentions", []) or []]
        names.extend(_MENTION_RE.findall(text))
        mentioned: list[NetworkUser] = []
        for name in names:
            user = self._users.get(name.lstrip("@"))
            if user and user not in mentioned:
                mentioned.append(user)
        return mentioned

    async def _handle_chat(self, client: ClientConnection, packet: dict) -> None:
        """Echo group chat to the channel, then let the dispatcher act on it."""
        user = self._users.get(client.username or "")
        if not user:
            return

        channel_type = ChannelType.from_str(packet.get("convo"))
        if channel_type is None:
            logger.debug(
                "Dropping chat from %s with unknown convo %r", user.username, packet.get("convo")
            )
            return
        text = str(packet.get("message", "")).strip()

        if channel_type is ChannelType.GROUP:
            # Echo the message to everyone in the group
            for member in self._online_users():
                member.speak_group(f"{user.username}: {text}")

        message = InboundMessage(
            author=user,
            channel_type=channel_type,
            text=text,
            mentions=self._resolve_mentions(packet, text),
        )
        self._dispatcher.handle_message(message)

    async def _handle_ping(self, client: ClientConnection) -> None:
        await client.send({"type": "pong"})


async def run_server(
    host: str = "0.0.0.0",
    port: int = 8000,
    locales_dir: str | Path | None = None,
    ssl_cert: str | Path | None = None,
    ssl_key: str | Path | None = None,
    turn_duration_ms: int = DEFAULT_TURN_DURATION_MS,
) -> None:
    """Run the server.

    Args:
        host: Host address to bind to
        port: Port number to listen on
        locales_dir: Directory holding the .ftl message files
        ssl_cert: Path to SSL certificate file (for WSS support)
        ssl_key: Path to SSL private key file (for WSS support)
        turn_duration_ms: How long each performer gets
    """
    server = Server(
        host=host,
        port=port,
        locales_dir=locales_dir,
        ssl_cert=ssl_cert,
        ssl_key=ssl_key,
        turn_duration_ms=turn_duration_ms,
    )
    await server.start()

    try:
        # Serve until cancelled
        while True:
            await asyncio.sleep(1)
    finally:
        await server.stop()
