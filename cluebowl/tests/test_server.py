import asyncio

import pytest

from cluebowl.channels.network_channel import NetworkChannel
from cluebowl.commands.dispatcher import CommandDispatcher
from cluebowl.core.server import Server
from cluebowl.core.tick import TickScheduler
from cluebowl.game.session import GameSession
from cluebowl.messages.localization import Localization
from cluebowl.network.websocket_server import decode_packet
from cluebowl.users.network_user import NetworkUser


class DummyClient:
    def __init__(self, address: str = "127.0.0.1:5000"):
        self.address = address
        self.username = None
        self.authenticated = False
        self.closed = False
        self.sent: list[dict] = []

    async def send(self, packet: dict) -> None:
        self.sent.append(packet)

    async def send_many(self, packets: list[dict]) -> None:
        self.sent.extend(packets)

    async def close(self) -> None:
        self.closed = True


class DummyWebSocketServer:
    def __init__(self, clients: dict[str, DummyClient]):
        self.clients = clients

    def get_client_by_username(self, username: str) -> DummyClient | None:
        return self.clients.get(username)


def _make_server() -> Server:
    Localization.init()
    server = Server.__new__(Server)
    server._ws_server = None
    server._tick_scheduler = None
    server._users = {}
    server._channel = NetworkChannel(server._online_users)
    server._session = GameSession(turn_duration_ms=100)
    server._dispatcher = CommandDispatcher(server._session, server._channel)
    server._send_tasks = set()
    return server


async def _login(server: Server, username: str) -> DummyClient:
    client = DummyClient(f"127.0.0.1:{len(server._users) + 5000}")
    await server._on_client_message(client, {"type": "authorize", "username": username})
    return client


def _group_texts(server: Server, username: str) -> list[str]:
    user = server._users[username]
    return [
        p["text"]
        for p in user.get_queued_messages()
        if p["type"] == "speak" and p["convo"] == "group"
    ]


@pytest.mark.asyncio
async def test_authorize_creates_user() -> None:
    server = _make_server()
    client = await _login(server, "Alice")

    assert client.authenticated
    assert client.username == "Alice"
    assert client.sent[-1]["type"] == "authorize_success"
    assert client.sent[-1]["username"] == "Alice"
    assert server._users["Alice"].connection is client


@pytest.mark.asyncio
@pytest.mark.parametrize("username", ["", "   ", "two words", "a@b"])
async def test_authorize_rejects_bad_usernames(username: str) -> None:
    server = _make_server()
    client = DummyClient()
    await server._on_client_message(client, {"type": "authorize", "username": username})

    assert not client.authenticated
    assert client.sent == [
        {"type": "disconnect", "reason": "Invalid username", "reconnect": False}
    ]
    assert client.closed
    assert server._users == {}


@pytest.mark.asyncio
async def test_reconnect_keeps_identity() -> None:
    server = _make_server()
    await _login(server, "Alice")
    original = server._users["Alice"]

    client = DummyClient("127.0.0.1:6000")
    await server._on_client_message(client, {"type": "authorize", "username": "Alice"})

    assert server._users["Alice"] is original
    assert original.connection is client


@pytest.mark.asyncio
async def test_unknown_locale_falls_back_to_english() -> None:
    server = _make_server()
    client = DummyClient()
    await server._on_client_message(
        client, {"type": "authorize", "username": "Alice", "locale": "xx"}
    )
    assert server._users["Alice"].locale == "en"


def test_decode_packet() -> None:
    assert decode_packet('{"type": "ping"}') == {"type": "ping"}
    assert decode_packet(b'{"type": "chat", "message": "hi"}') == {
        "type": "chat",
        "message": "hi",
    }
    assert decode_packet("not json") is None
    assert decode_packet("[1, 2]") is None
    assert decode_packet('{"message": "no type"}') is None
    assert decode_packet(b"\xff\xfe") is None


@pytest.mark.asyncio
async def test_unauthenticated_packets_are_ignored() -> None:
    server = _make_server()
    client = DummyClient()
    await server._on_client_message(client, {"type": "ping"})
    await server._on_client_message(
        client, {"type": "chat", "convo": "group", "message": "!start-game"}
    )
    assert client.sent == []


@pytest.mark.asyncio
async def test_ping() -> None:
    server = _make_server()
    client = await _login(server, "Alice")
    await server._on_client_message(client, {"type": "ping"})
    assert client.sent[-1] == {"type": "pong"}


@pytest.mark.asyncio
async def test_group_chat_is_echoed_to_everyone() -> None:
    server = _make_server()
    alice = await _login(server, "Alice")
    await _login(server, "Bob")

    await server._on_client_message(
        alice, {"type": "chat", "convo": "group", "message": "hello all"}
    )

    assert _group_texts(server, "Alice") == ["Alice: hello all"]
    assert _group_texts(server, "Bob") == ["Alice: hello all"]


@pytest.mark.asyncio
async def test_direct_chat_is_private() -> None:
    server = _make_server()
    alice = await _login(server, "Alice")
    await _login(server, "Bob")

    await server._on_client_message(
        alice, {"type": "chat", "convo": "direct", "message": "!add-clue Big Ben"}
    )

    assert server._users["Alice"].get_queued_messages() == [
        {
            "type": "speak",
            "convo": "direct",
            "text": "Got it, that's your first clue in the bowl.",
        }
    ]
    assert server._users["Bob"].get_queued_messages() == []
    assert server.session.bowl.num_clues() == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("convo", ["dm", "", None, 7])
async def test_chat_with_unknown_convo_is_dropped(convo) -> None:
    """A private clue sent with a mistyped convo never reaches the group."""
    server = _make_server()
    alice = await _login(server, "Alice")
    await _login(server, "Bob")

    packet = {"type": "chat", "message": "!add-clue Secret Clue"}
    if convo is not None:
        packet["convo"] = convo
    await server._on_client_message(alice, packet)

    for username in ("Alice", "Bob"):
        assert server._users[username].get_queued_messages() == []
    assert server.session.bowl.num_clues() == 0


@pytest.mark.asyncio
async def test_flush_keeps_sends_until_done() -> None:
    server = _make_server()
    alice = await _login(server, "Alice")
    server._ws_server = DummyWebSocketServer({"Alice": alice})
    alice.sent.clear()

    server._users["Alice"].speak("one")
    server._users["Alice"].speak("two")
    server._flush_user_messages()

    assert len(server._send_tasks) == 1
    await asyncio.gather(*server._send_tasks)
    assert [p["text"] for p in alice.sent] == ["one", "two"]
    assert server._send_tasks == set()


@pytest.mark.asyncio
async def test_flush_drops_messages_for_offline_users() -> None:
    server = _make_server()
    await _login(server, "Alice")
    server._ws_server = DummyWebSocketServer({})

    server._users["Alice"].speak("missed")
    server._flush_user_messages()

    assert server._send_tasks == set()
    assert server._users["Alice"].get_queued_messages() == []


@pytest.mark.asyncio
async def test_mentions_resolve_from_text_and_packet() -> None:
    server = _make_server()
    alice = await _login(server, "Alice")
    await _login(server, "Bob")
    await _login(server, "Carol")

    await server._on_client_message(
        alice,
        {
            "type": "chat",
            "convo": "group",
            "message": "!add-players @Bob @Nobody",
            "mentions": ["Carol", "Bob"],
        },
    )

    assert server.session.player_names() == ["Carol", "Bob"]
    assert "Added @Carol and @Bob to the game" in _group_texts(server, "Alice")


@pytest.mark.asyncio
async def test_full_turn_over_the_wire() -> None:
    server = _make_server()
    alice = await _login(server, "Alice")
    bob = await _login(server, "Bob")

    async def chat(client, convo, message):
        await server._on_client_message(
            client, {"type": "chat", "convo": convo, "message": message}
        )

    await chat(alice, "direct", "!add-clue Big Ben")
    await chat(bob, "direct", "!add-clue Nessie")
    await chat(alice, "group", "!add-players @Alice @Bob")
    await chat(alice, "group", "!start-game")
    performer = server.session.get_user(server.session.turn.performer_id)
    performer_client = alice if performer.username == "Alice" else bob
    for user in server._users.values():
        user.get_queued_messages()

    await chat(performer_client, "group", "!start-turn")
    reveal = [
        p
        for p in performer.get_queued_messages()
        if p["convo"] == "direct"
    ]
    assert len(reveal) == 1
    assert reveal[0]["text"].startswith("Your clue is:")

    server.session.on_tick()
    server.session.on_tick()
    assert server.session.turn.is_finished()


def test_online_users_requires_authentication() -> None:
    server = _make_server()
    client = DummyClient()
    client.username = "Ghost"

    server._users["Ghost"] = NetworkUser("Ghost", "en", client)
    assert server._online_users() == []
    client.authenticated = True
    assert [u.username for u in server._online_users()] == ["Ghost"]


@pytest.mark.asyncio
async def test_tick_scheduler_calls_back_until_stopped() -> None:
    calls = []
    scheduler = TickScheduler(lambda: calls.append(1), interval_ms=5)
    await scheduler.start()
    await asyncio.sleep(0.1)
    await scheduler.stop()

    assert len(calls) >= 2
    assert not scheduler.running
    count = len(calls)
    await asyncio.sleep(0.03)
    assert len(calls) == count


@pytest.mark.asyncio
async def test_tick_scheduler_survives_handler_errors() -> None:
    calls = []

    def flaky():
        calls.append(1)
        raise RuntimeError("boom")

    scheduler = TickScheduler(flaky, interval_ms=5)
    await scheduler.start()
    await asyncio.sleep(0.1)
    await scheduler.stop()

    assert len(calls) >= 2
