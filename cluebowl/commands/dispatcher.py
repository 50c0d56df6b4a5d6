"""Routes chat messages to game session operations."""

import logging
from typing import Callable

from ..channels.base import Channel
from ..game.session import GameSession
from ..messages.inbound import InboundMessage
from ..messages.localization import Localization

logger = logging.getLogger(__name__)

Handler = Callable[[InboundMessage], None]


class CommandDispatcher:
    """
    Turns inbound chat messages into game actions.

    Commands sent directly to the bot and commands posted in the group
    channel are separate sets. Invalid commands are answered with a
    message and never touch game state. Independently of commands, any
    message from the performer of a running turn counts as "solved".
    """

    def __init__(self, session: GameSession, channel: Channel):
        self.session = session
        self.channel = channel
        self._direct_commands: dict[str, Handler] = {
            "!add-clue": self._handle_add_clue,
            "!my-clues": self._handle_my_clues,
            "!help": self._handle_help,
        }
        self._group_commands: dict[str, Handler] = {
            "!add-clue": self._handle_add_clue_in_group,
            "!add-players": self._handle_add_players,
            "!list-players": self._handle_list_players,
            "!start-game": self._handle_start_game,
            "!next-turn": self._handle_next_turn,
            "!start-turn": self._handle_start_turn,
            "!clue-summary": self._handle_clue_summary,
            "!game-state": self._handle_game_state,
            "!restart-game": self._handle_restart_game,
            "!reset-game": self._handle_reset_game,
            "!help": self._handle_help,
        }

    def handle_message(self, message: InboundMessage) -> None:
        """Handle one chat message."""
        if message.is_direct and message.is_command:
            self._dispatch(self._direct_commands, message)

        if self.session.is_performer_running(message.author):
            # Mark current clue as solved, and get the next one
            self.session.next_clue()

        if not message.is_direct and message.is_command:
            self._dispatch(self._group_commands, message)

    def _dispatch(self, commands: dict[str, Handler], message: InboundMessage) -> None:
        handler = commands.get(message.command)
        if handler is None:
            logger.info("Unknown command %r from %s", message.command, message.author.username)
            if message.is_direct:
                self._reply(message, "unknown-command-direct")
            else:
                self._reply(message, "unknown-command-group", player=message.author.mention)
            return
        handler(message)

    def _reply(self, message: InboundMessage, message_id: str, **kwargs) -> None:
        """Answer in the conversation the message came from."""
        if message.is_direct:
            message.author.speak_l(message_id, **kwargs)
        else:
            self.channel.speak_l(message_id, **kwargs)

    # ==========================================================================
    # Direct commands
    # ==========================================================================

    def _handle_add_clue(self, message: InboundMessage) -> None:
        if self.session.locked:
            self._reply(message, "clue-game-locked")
            return
        text = message.args
        if not text:
            self._reply(message, "clue-empty")
            return
        self.session.add_clue(message.author, text)
        count = len(self.session.clues_from(message.author))
        self._reply(message, "clue-added", count=count)

    def _handle_my_clues(self, message: InboundMessage) -> None:
        clues = self.session.clues_from(message.author)
        if not clues:
            self._reply(message, "my-clues-none")
            return
        self._reply(message, "my-clues", clues="\n".join(f"    {c.text}" for c in clues))

    def _handle_help(self, message: InboundMessage) -> None:
        self._reply(message, "help-direct" if message.is_direct else "help-group")

    # ==========================================================================
    # Group commands
    # ==========================================================================

    def _handle_add_clue_in_group(self, message: InboundMessage) -> None:
        self._reply(message, "clue-dm-only")

    def _handle_add_players(self, message: InboundMessage) -> None:
        if self.session.locked:
            self._reply(message, "players-game-locked")
            return
        if not message.mentions:
            self._reply(message, "players-none-mentioned")
            return

        added: list[str] = []
        duplicates: list[str] = []
        for user in message.mentions:
            if self.session.add_player(user):
                added.append(user.mention)
            else:
                duplicates.append(user.mention)

        locale = self.channel.locale
        if added:
            self._reply(
                message,
                "players-added",
                players=Localization.format_list_and(locale, added),
            )
        if duplicates:
            self._reply(
                message,
                "players-already-added",
                players=Localization.format_list_and(locale, duplicates),
                count=len(duplicates),
            )

    def _handle_list_players(self, message: InboundMessage) -> None:
        names = self.session.player_names()
        if not names:
            self._reply(message, "players-list-empty")
            return
        self._reply(
            message,
            "players-list",
            players=Localization.format_list_and(self.channel.locale, names),
        )

    def _handle_start_game(self, message: InboundMessage) -> None:
        if self.session.locked:
            self._reply(message, "game-already-started")
        elif not self.session.enough_players():
            self._reply(message, "game-not-enough-players")
        elif not self.session.enough_clues():
            self._reply(message, "game-not-enough-clues")
        else:
            self.session.start_game(self.channel)
            self.session.prep_turn()

    def _handle_next_turn(self, message: InboundMessage) -> None:
        if not self.session.locked:
            self._reply(message, "game-not-started")
        elif self.session.can_prep_turn():
            self.session.prep_turn()
        else:
            self._reply(message, "turn-not-ready")

    def _handle_start_turn(self, message: InboundMessage) -> None:
        turn = self.session.turn
        if not self.session.locked:
            self._reply(message, "game-not-started-turn")
        elif turn is not None and turn.is_ready():
            self.session.run_turn(turn.token)
        else:
            self._reply(message, "turn-not-ready")

    def _handle_clue_summary(self, message: InboundMessage) -> None:
        bowl = self.session.bowl
        self._reply(
            message, "clue-summary", unsolved=bowl.num_unsolved(), total=bowl.num_clues()
        )

    def _handle_game_state(self, message: InboundMessage) -> None:
        self._reply(message, "game-state", **self.session.state_args())

    def _handle_restart_game(self, message: InboundMessage) -> None:
        turn = self.session.turn
        if not self.session.locked:
            self._reply(message, "game-not-started")
        elif turn is not None and turn.is_running():
            self._reply(message, "turn-in-progress")
        else:
            self.session.restart_game()
            self.session.prep_turn()

    def _handle_reset_game(self, message: InboundMessage) -> None:
        self.session.reset()
        self._reply(message, "game-was-reset")
