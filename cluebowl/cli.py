"""
Command-line interface to simulate and watch clue bowl games.

All operations are parameter-based with no interactive input required.

Usage examples:
    # Simulate a game with 3 players and 2 clues each
    python -m cluebowl.cli simulate --players 3 --clues 2

    # Simulate with specific player names and short turns
    python -m cluebowl.cli simulate --players Alice,Bob,Charlie --turn-seconds 10

    # Output as JSON for machine parsing
    python -m cluebowl.cli simulate --players 4 --json

    # Test serialization (save/restore after each tick)
    python -m cluebowl.cli simulate --players 2 --test-serialization
"""

import argparse
import json
import random
import sys
from pathlib import Path
from typing import Any

# Allow running as standalone script
_MODULE_DIR = Path(__file__).parent
if __name__ == "__main__":
    sys.path.insert(0, str(_MODULE_DIR.parent))

from cluebowl.channels.base import Channel  # noqa: E402
from cluebowl.commands.dispatcher import CommandDispatcher  # noqa: E402
from cluebowl.game.session import GameSession  # noqa: E402
from cluebowl.game.turn_timer import TICKS_PER_SECOND  # noqa: E402
from cluebowl.messages.inbound import ChannelType, InboundMessage  # noqa: E402
from cluebowl.messages.localization import Localization  # noqa: E402
from cluebowl.users.test_user import MockUser  # noqa: E402

PLAYER_NAMES = [
    "Alice",
    "Bob",
    "Charlie",
    "Diana",
    "Eve",
    "Frank",
    "Grace",
    "Henry",
    "Ivy",
    "Jack",
]

CLUE_TEXTS = [
    "The Eiffel Tower",
    "A penguin in a tuxedo",
    "Winston Churchill",
    "Making toast",
    "The moon landing",
    "A haunted house",
    "Beyonce",
    "Riding a unicycle",
    "Sherlock Holmes",
    "A thunderstorm",
    "Bagpipes",
    "The Loch Ness Monster",
    "Paddington Bear",
    "Brushing your teeth",
    "The Titanic",
    "A grumpy cat",
    "Mount Everest",
    "Knitting a scarf",
    "Frankenstein",
    "A game of chess",
]


class SpectatorLog:
    """Collects everything said during a simulation, optionally echoing it."""

    def __init__(self, json_mode: bool = False, quiet: bool = False):
        self.messages: list[str] = []
        self._echo = not json_mode and not quiet

    def log(self, text: str) -> None:
        self.messages.append(text)
        if self._echo:
            print(f"  {text}")


class SpectatorChannel(Channel):
    """The group channel, as seen by someone watching the game."""

    def __init__(self, log: SpectatorLog):
        self._log = log

    def speak(self, text: str) -> None:
        self._log.log(text)


class SimulatedPlayer(MockUser):
    """A scripted player whose direct messages show up in the spectator log."""

    def __init__(self, username: str, log: SpectatorLog):
        super().__init__(username)
        self._log = log

    def speak(self, text: str) -> None:
        super().speak(text)
        self._log.log(f"[to {self.username}] {text}")


class GameSimulator:
    """Plays a whole game through the command dispatcher with scripted players."""

    def __init__(
        self,
        player_names: list[str],
        clues_per_player: int = 2,
        turn_seconds: int = 30,
        solve_every_ticks: int = 60,
        json_mode: bool = False,
        quiet: bool = False,
        max_ticks: int = 1000000,
        test_serialization: bool = False,
    ):
        self.player_names = player_names
        self.clues_per_player = clues_per_player
        self.turn_seconds = turn_seconds
        self.solve_every_ticks = max(1, solve_every_ticks)
        self.json_mode = json_mode
        self.quiet = quiet
        self.max_ticks = max_ticks
        self.test_serialization = test_serialization

        self.log = SpectatorLog(json_mode=json_mode, quiet=quiet)
        self.channel = SpectatorChannel(self.log)
        self.session = GameSession(turn_duration_ms=turn_seconds * 1000)
        self.dispatcher = CommandDispatcher(self.session, self.channel)
        self.players: list[SimulatedPlayer] = []
        self.turns_played = 0

    def _say(self, user: SimulatedPlayer, text: str, direct: bool = False) -> None:
        mentions = [p for p in self.players if f"@{p.username}" in text.split()]
        if not direct:
            self.log.log(f"{user.username}: {text}")
        self.dispatcher.handle_message(
            InboundMessage(
                author=user,
                channel_type=ChannelType.DIRECT if direct else ChannelType.GROUP,
                text=text,
                mentions=mentions,
            )
        )

    def setup(self) -> bool:
        """Register players and clues, then start the game. Returns True on success."""
        if len(self.player_names) < 2:
            if not self.json_mode:
                print("Error: a game needs at least 2 players")
            return False

        self.players = [SimulatedPlayer(name, self.log) for name in self.player_names]
        host = self.players[0]

        clue_pool = CLUE_TEXTS.copy()
        random.shuffle(clue_pool)
        for i, player in enumerate(self.players):
            for j in range(self.clues_per_player):
                text = clue_pool[(i * self.clues_per_player + j) % len(clue_pool)]
                self._say(player, f"!add-clue {text}", direct=True)

        self._say(host, "!add-players " + " ".join(p.mention for p in self.players))
        self._say(host, "!start-game")
        return self.session.locked

    def _save_and_restore(self, tick: int) -> None:
        """Save the session to JSON and restore it, testing serialization."""
        saved_users = dict(self.session._users)
        saved_channel = self.session._channel

        try:
            session_json = self.session.to_json()
        except Exception as e:
            raise RuntimeError(f"Serialization failed at tick {tick}: {e}")

        try:
            self.session = GameSession.from_json(session_json)
        except Exception as e:
            raise RuntimeError(f"Deserialization failed at tick {tick}: {e}")

        self.session._users = saved_users
        self.session._channel = saved_channel
        self.dispatcher.session = self.session

    def _act(self, tick: int) -> None:
        """Let whoever's move it is make it."""
        turn = self.session.turn
        if turn is None:
            return
        performer = self.session.get_user(turn.performer_id)
        if turn.is_ready() and performer:
            self.turns_played += 1
            self._say(performer, "!start-turn")
        elif turn.is_running() and performer and tick % self.solve_every_ticks == 0:
            self._say(performer, "got it!", direct=True)
        elif turn.is_finished():
            self._say(self.players[0], "!next-turn")

    def run(self) -> dict[str, Any]:
        """Run the simulation until the game is over. Returns results dict."""
        if not self.json_mode and not self.quiet:
            mode_str = " [testing serialization]" if self.test_serialization else ""
            print(f"\n=== Clue Bowl ({len(self.players)} players){mode_str} ===\n")

        tick = 0
        serialization_error = None
        while self.session.locked and tick < self.max_ticks:
            self.session.on_tick()
            self._act(tick)
            tick += 1

            if self.test_serialization and self.session.locked:
                try:
                    self._save_and_restore(tick)
                except RuntimeError as e:
                    serialization_error = str(e)
                    if not self.json_mode:
                        print(f"\nError: {serialization_error}")
                    break

        timed_out = tick >= self.max_ticks
        if timed_out and not self.json_mode:
            print(f"\nWarning: Game timed out after {self.max_ticks} ticks")

        results = {
            "players": self.player_names,
            "ticks": tick,
            "seconds": tick / TICKS_PER_SECOND,
            "turns": self.turns_played,
            "timed_out": timed_out,
            "messages": self.log.messages,
        }

        if self.test_serialization:
            results["serialization_tested"] = True
            if serialization_error:
                results["serialization_error"] = serialization_error
            else:
                results["serialization_passed"] = True

        return results


def cmd_simulate(args):
    """Simulate a game with scripted players."""
    if args.players.isdigit():
        player_names = PLAYER_NAMES[: int(args.players)]
    else:
        player_names = [name.strip() for name in args.players.split(",")]

    if args.seed is not None:
        random.seed(args.seed)

    Localization.init(args.locales_dir)

    simulator = GameSimulator(
        player_names=player_names,
        clues_per_player=args.clues,
        turn_seconds=args.turn_seconds,
        solve_every_ticks=args.solve_every,
        json_mode=args.json,
        quiet=args.quiet,
        max_ticks=args.max_ticks,
        test_serialization=args.test_serialization,
    )

    if not simulator.setup():
        sys.exit(1)

    results = simulator.run()

    if args.json:
        print(json.dumps(results, indent=2))
    elif not args.quiet:
        print(
            f"\n=== Finished: {results['turns']} turns in {results['seconds']:.0f}s of game time ==="
        )


def main():
    parser = argparse.ArgumentParser(
        description="Clue Bowl simulation CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    sim_parser = subparsers.add_parser("simulate", help="Simulate a full game")
    sim_parser.add_argument(
        "--players",
        "-p",
        required=True,
        help="Number of players (e.g., 3) or comma-separated names (e.g., Alice,Bob)",
    )
    sim_parser.add_argument(
        "--clues", "-c", type=int, default=2, help="Clues per player (default: 2)"
    )
    sim_parser.add_argument(
        "--turn-seconds", type=int, default=30, help="Turn length (default: 30)"
    )
    sim_parser.add_argument(
        "--solve-every",
        type=int,
        default=60,
        help="Ticks between solved clues (default: 60, i.e. every 3s)",
    )
    sim_parser.add_argument("--seed", type=int, help="Random seed")
    sim_parser.add_argument("--locales-dir", help="Directory of .ftl message files")
    sim_parser.add_argument("--json", action="store_true", help="Output as JSON")
    sim_parser.add_argument(
        "--quiet", "-q", action="store_true", help="Suppress game output"
    )
    sim_parser.add_argument(
        "--max-ticks",
        type=int,
        default=1000000,
        help="Maximum ticks before timeout (default: 1000000)",
    )
    sim_parser.add_argument(
        "--test-serialization",
        "-s",
        action="store_true",
        help="Save and restore game state after each tick to test serialization",
    )

    args = parser.parse_args()

    if args.command == "simulate":
        cmd_simulate(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
