from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from mashumaro.mixins.json import DataClassJSONMixin

logger = logging.getLogger(__name__)


@dataclass
class TurnOrder(DataClassJSONMixin):
    """
    Who performs, and who each performer shows clues to.

    ``shows_for`` maps performer id -> guesser id and always forms a single
    cycle over every registered player. ``awaiting_turn`` is the queue of
    players still owed a turn; it is popped from the end and refilled from
    ``players`` (in registration order) once drained.
    """

    players: list[str] = field(default_factory=list)
    shows_for: dict[str, str] = field(default_factory=dict)
    awaiting_turn: list[str] = field(default_factory=list)
    had_turn: list[str] = field(default_factory=list)

    def add_player(self, player_id: str) -> bool:
        """Register a player. Registering the same player twice is a no-op.

        Returns:
            True if the player was newly added.
        """
        if player_id in self.players:
            logger.info("Player %s is already registered", player_id)
            return False
        self.players.append(player_id)
        logger.info("Added player %s to the game", player_id)
        return True

    def num_players(self) -> int:
        return len(self.players)

    def make_turn_order(self) -> None:
        """Pick a random single-cycle pairing of performers to guessers."""
        if len(self.players) < 2:
            raise ValueError("Need at least two players to pair performers with guessers")

        queue = self.players.copy()
        random.shuffle(queue)
        first_player = queue.pop()
        performer = first_player
        shows_for: dict[str, str] = {}
        while queue:
            guesser = queue.pop()
            shows_for[performer] = guesser
            performer = guesser
        shows_for[performer] = first_player
        self.shows_for = shows_for

    def reset_queue(self) -> None:
        """Refill the queue in registration order and draw fresh pairings."""
        self.awaiting_turn = self.players.copy()
        self.make_turn_order()
        self.had_turn = []

    def num_waiting(self) -> int:
        return len(self.awaiting_turn)

    def next_performer(self) -> str:
        """Pop the next player owed a turn. The queue must not be empty."""
        return self.awaiting_turn.pop()

    def guesser_for(self, performer_id: str) -> str:
        return self.shows_for[performer_id]
