"""
The game session: round progression and the turn lifecycle.

A session owns the bowl, the turn order and the active turn, and is the
only thing that arms the turn timer. It is driven from one event loop
(chat events plus server ticks), so it needs no locking; the one race it
has, a timeout landing after the bowl already ended the turn, is settled by
the token check in ``end_turn``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from mashumaro.mixins.json import DataClassJSONMixin

from .bowl import Bowl
from .clue import Clue
from .turn import Turn, TurnStatus
from .turn_order import TurnOrder
from .turn_timer import TurnTimer

if TYPE_CHECKING:
    from ..channels.base import Channel
    from ..users.base import User

logger = logging.getLogger(__name__)

DEFAULT_TURN_DURATION_MS = 90_000
MIN_PLAYERS = 2


class Round(Enum):
    SENTENCE = "sentence"
    WORD = "word"
    CHARADES = "charades"


@dataclass
class GameSession(DataClassJSONMixin):
    """
    A single clue bowl game.

    Serializable state lives in dataclass fields; the attached users and
    the output channel are runtime-only and are never serialized.
    """

    round: Round = Round.SENTENCE
    bowl: Bowl = field(default_factory=Bowl)
    turn_order: TurnOrder = field(default_factory=TurnOrder)
    locked: bool = False
    turn: Turn | None = None
    turn_duration_ms: int = DEFAULT_TURN_DURATION_MS
    timer: TurnTimer = field(default_factory=TurnTimer)

    def __post_init__(self):
        self._users: dict[str, User] = {}  # user id -> User
        self._channel: Channel | None = None

    # ==========================================================================
    # Users and channel
    # ==========================================================================

    @property
    def channel(self) -> Channel | None:
        return self._channel

    def attach_user(self, user: User) -> None:
        self._users[user.uuid] = user

    def get_user(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def mention(self, user_id: str) -> str:
        user = self._users.get(user_id)
        return user.mention if user else user_id

    def player_names(self) -> list[str]:
        names = []
        for player_id in self.turn_order.players:
            user = self._users.get(player_id)
            names.append(user.username if user else player_id)
        return names

    def _announce(self, message_id: str, **kwargs) -> None:
        if self._channel is None:
            logger.warning("No channel to announce %s on", message_id)
            return
        self._channel.speak_l(message_id, **kwargs)

    # ==========================================================================
    # Lobby
    # ==========================================================================

    def add_player(self, user: User) -> bool:
        """Register a player for the next game. Returns False for duplicates."""
        self.attach_user(user)
        return self.turn_order.add_player(user.uuid)

    def add_clue(self, user: User, text: str) -> Clue:
        clue = Clue.from_user(user, text)
        self.attach_user(user)
        self.bowl.add_clue(clue)
        return clue

    def clues_from(self, user: User) -> list[Clue]:
        return self.bowl.clues_from(user.uuid)

    def enough_players(self) -> bool:
        return self.turn_order.num_players() >= MIN_PLAYERS

    def enough_clues(self) -> bool:
        return self.bowl.num_clues() > 0

    def start_game(self, channel: Channel) -> None:
        """Lock the lobby and get ready for the first turn.

        Callers check enough_players() and enough_clues() first.
        """
        self._channel = channel
        self.locked = True
        self.bowl.shuffle()
        self.turn_order.make_turn_order()
        self.turn_order.reset_queue()
        logger.info(
            "Game started with %d players and %d clues",
            self.turn_order.num_players(),
            self.bowl.num_clues(),
        )
        self._announce("game-starting")

    # ==========================================================================
    # Turn lifecycle
    # ==========================================================================

    def can_prep_turn(self) -> bool:
        return self.locked and (self.turn is None or self.turn.is_finished())

    def prep_turn(self) -> Turn:
        """Queue up the next performer and their guesser."""
        if self.turn_order.num_waiting() == 0:
            logger.info("Queue empty, resetting it")
            self.turn_order.reset_queue()
        performer_id = self.turn_order.next_performer()
        guesser_id = self.turn_order.guesser_for(performer_id)
        self.turn = Turn(performer_id=performer_id, guesser_id=guesser_id)
        self._announce(
            "turn-prepped",
            performer=self.mention(performer_id),
            guesser=self.mention(guesser_id),
        )
        logger.info(
            "Prepped turn performer=%s guesser=%s status=%s token=%s",
            performer_id,
            guesser_id,
            self.turn.status.value,
            self.turn.token,
        )
        return self.turn

    def is_performer_running(self, user: User) -> bool:
        """Whether this user is performing the turn currently in play."""
        return (
            self.turn is not None
            and self.turn.is_running()
            and self.turn.performer_id == user.uuid
        )

    def run_turn(self, token: str) -> bool:
        """Start the prepped turn: first clue out, timer armed."""
        turn = self.turn
        if turn is None or turn.token != token or not turn.is_ready():
            logger.info("Ignoring start for turn token=%s", token)
            return False

        logger.info("Starting turn with token=%s", token)
        turn.status = TurnStatus.RUNNING
        self.draw_clue()
        # Drawing from an empty bowl ends the turn on the spot
        if self.turn is turn and turn.is_running():
            self._announce("turn-go", performer=self.mention(turn.performer_id))
            self.timer.start(self.turn_duration_ms, token)
        return True

    def draw_clue(self) -> None:
        turn = self.turn
        if turn is None:
            return
        clue = self.bowl.draw()
        if clue is not None:
            turn.currently_solving = clue
            performer = self.get_user(turn.performer_id)
            if performer:
                logger.debug("Showing %s to %s", clue, performer.username)
                clue.show_to(performer)
        else:
            turn.currently_solving = None
            self.end_turn(turn.token)
            self.next_round()

    def next_clue(self) -> None:
        """Mark the current clue solved and draw another."""
        turn = self.turn
        if turn is None or not turn.is_running():
            return
        if turn.currently_solving is not None:
            turn.solved_clues.append(turn.currently_solving)
            turn.currently_solving = None
        self.draw_clue()

    def end_turn(self, token: str | None) -> bool:
        """Finish the running turn this token belongs to.

        Returns False, changing nothing, when the token is stale or the turn
        already finished.
        """
        turn = self.turn
        if turn is None or token != turn.token or not turn.is_running():
            logger.debug("Got an end_turn for an old turn token=%s", token)
            return False

        logger.info("Ending turn with token=%s", token)
        turn.status = TurnStatus.FINISHED
        if self.timer.token == token:
            self.timer.clear()

        self._announce_recap(turn)

        self.bowl.put_back(turn.currently_solving)
        turn.currently_solving = None
        for clue in turn.solved_clues:
            self.bowl.make_solved(clue)
        turn.solved_clues = []
        self.turn_order.had_turn.append(turn.performer_id)

        logger.info(self.bowl.summary())
        self._announce("clues-left", count=self.bowl.num_unsolved())
        return True

    def _announce_recap(self, turn: Turn) -> None:
        num_solved = turn.num_solved()
        performer = self.mention(turn.performer_id)
        if num_solved == 0:
            self._announce("turn-recap-none", performer=performer)
            return
        if num_solved <= 2:
            message_id = "turn-recap-rough"
        elif num_solved <= 4:
            message_id = "turn-recap-decent"
        else:
            message_id = "turn-recap-great"
        self._announce(
            message_id, performer=performer, count=num_solved, clues=turn.recap()
        )

    def on_tick(self) -> None:
        """Advance the turn timer; a timeout ends the turn it was armed for."""
        if self.timer.tick():
            token = self.timer.token
            self.timer.clear()
            logger.info("Turn timer expired for token=%s", token)
            self.end_turn(token)

    # ==========================================================================
    # Rounds
    # ==========================================================================

    def next_round(self) -> None:
        if self.round is Round.SENTENCE:
            self.round = Round.WORD
            self.bowl.put_all_back()
            self.bowl.shuffle()
            self._announce("round-word")
        elif self.round is Round.WORD:
            self.round = Round.CHARADES
            self.bowl.put_all_back()
            self.bowl.shuffle()
            self._announce("round-charades")
        else:
            self._announce("game-over")
            self.reset()
        logger.info("Round is now %s", self.round.value)

    def restart_game(self) -> None:
        """Go back to the sentence round with every clue back in the bowl.

        Players, clues and the lock are kept. Callers make sure no turn is
        running.
        """
        self.timer.clear()
        self.round = Round.SENTENCE
        self.turn = None
        self.bowl.put_all_back()
        self.bowl.shuffle()
        self.turn_order.reset_queue()
        logger.info("Game restarted: %s", self.bowl.summary())
        self._announce("game-restarted")

    def reset(self) -> None:
        """Throw the whole game away and go back to an open lobby."""
        self.timer.clear()
        self.round = Round.SENTENCE
        self.bowl = Bowl()
        self.turn_order = TurnOrder()
        self.locked = False
        self.turn = None
        self._channel = None
        self._users = {}
        logger.info("Game reset")

    # ==========================================================================
    # Reporting
    # ==========================================================================

    def state_args(self) -> dict[str, Any]:
        """Variables for the game-state message."""
        turn = self.turn
        return {
            "round": self.round.value,
            "locked": "yes" if self.locked else "no",
            "players": len(self.turn_order.players),
            "unsolved": self.bowl.num_unsolved(),
            "total": self.bowl.num_clues()
            + (1 if turn and turn.currently_solving else 0)
            + (turn.num_solved() if turn else 0),
            "turn": turn.status.value if turn else "none",
            "performer": self.mention(turn.performer_id) if turn else "-",
            "guesser": self.mention(turn.guesser_id) if turn else "-",
            "seconds": self.timer.seconds_remaining(),
        }
