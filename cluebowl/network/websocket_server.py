"""Websocket transport: one JSON object per frame in each direction."""

import json
import logging
import ssl
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Coroutine

import websockets
from websockets.asyncio.server import Server as WebSocketsServer, ServerConnection, serve

logger = logging.getLogger(__name__)

# Chat lines and clues are short; anything bigger than this is not a client of ours
MAX_FRAME_BYTES = 64 * 1024


def decode_packet(raw: str | bytes) -> dict[str, Any] | None:
    """Parse one frame into a packet, or None if it isn't a JSON object with a type."""
    try:
        packet = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if not isinstance(packet, dict) or not isinstance(packet.get("type"), str):
        return None
    return packet


@dataclass
class ClientConnection:
    """One open websocket, and who it has logged in as."""

    websocket: ServerConnection
    address: str
    username: str | None = None
    authenticated: bool = False

    async def send(self, packet: dict) -> None:
        await self.send_many([packet])

    async def send_many(self, packets: list[dict]) -> None:
        """Send packets in order; a closed connection drops the rest."""
        try:
            for packet in packets:
                await self.websocket.send(json.dumps(packet))
        except websockets.exceptions.ConnectionClosed:
            logger.debug("Dropped %d packet(s) for closed connection %s", len(packets), self.address)

    async def close(self) -> None:
        await self.websocket.close()


PacketHandler = Callable[[ClientConnection, dict], Coroutine]
ConnectionHandler = Callable[[ClientConnection], Coroutine]


class WebSocketServer:
    """
    Accepts chat clients and hands their decoded packets to the game server.

    Frames that aren't JSON objects with a ``type`` are skipped, the
    connection stays open.
    """

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 8000,
        on_connect: ConnectionHandler | None = None,
        on_disconnect: ConnectionHandler | None = None,
        on_message: PacketHandler | None = None,
        ssl_cert: str | Path | None = None,
        ssl_key: str | Path | None = None,
        max_frame_bytes: int = MAX_FRAME_BYTES,
    ):
        self.host = host
        self.port = port
        self._on_connect = on_connect
        self._on_disconnect = on_disconnect
        self._on_message = on_message
        self._max_frame_bytes = max_frame_bytes
        self._connections: dict[str, ClientConnection] = {}  # address -> connection
        self._server: WebSocketsServer | None = None
        self._ssl_context: ssl.SSLContext | None = None

        if ssl_cert and ssl_key:
            self._ssl_context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
            self._ssl_context.load_cert_chain(str(ssl_cert), str(ssl_key))

    @property
    def url(self) -> str:
        protocol = "wss" if self._ssl_context else "ws"
        return f"{protocol}://{self.host}:{self.port}"

    async def start(self) -> None:
        self._server = await serve(
            self._serve_connection,
            self.host,
            self.port,
            ssl=self._ssl_context,
            max_size=self._max_frame_bytes,
        )
        print(f"WebSocket server started on {self.url}")

    async def stop(self) -> None:
        """Stop listening and close every open connection."""
        if self._server:
            self._server.close()
            await self._server.wait_closed()
            self._server = None

        for connection in list(self._connections.values()):
            await connection.close()
        self._connections.clear()

    async def _serve_connection(self, websocket: ServerConnection) -> None:
        host, port = websocket.remote_address[:2]
        client = ClientConnection(websocket=websocket, address=f"{host}:{port}")
        self._connections[client.address] = client

        try:
            if self._on_connect:
                await self._on_connect(client)

            async for frame in websocket:
                packet = decode_packet(frame)
                if packet is None:
                    logger.debug("Skipping malformed frame from %s", client.address)
                    continue
                if self._on_message:
                    await self._on_message(client, packet)
        except websockets.exceptions.ConnectionClosed:
            logger.debug("Connection %s closed", client.address)
        finally:
            self._connections.pop(client.address, None)
            if self._on_disconnect:
                await self._on_disconnect(client)

    def get_client_by_username(self, username: str) -> ClientConnection | None:
        """The most recent authenticated connection for a username."""
        found = None
        for client in self._connections.values():
            if client.authenticated and client.username == username:
                found = client
        return found
