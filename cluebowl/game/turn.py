from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum

from mashumaro.mixins.json import DataClassJSONMixin

from .clue import Clue


class TurnStatus(Enum):
    READY = "ready"
    RUNNING = "running"
    FINISHED = "finished"


def new_token() -> str:
    return uuid.uuid4().hex


@dataclass
class Turn(DataClassJSONMixin):
    """
    One performer's timed attempt to get their guesser through the bowl.

    A turn only moves forward: READY -> RUNNING -> FINISHED. Finished turns
    are replaced by the next prepped turn, never restarted. The token lets a
    delayed timeout check that it still belongs to this turn.
    """

    performer_id: str
    guesser_id: str
    status: TurnStatus = TurnStatus.READY
    currently_solving: Clue | None = None
    solved_clues: list[Clue] = field(default_factory=list)
    token: str = field(default_factory=new_token)

    def is_ready(self) -> bool:
        return self.status is TurnStatus.READY

    def is_running(self) -> bool:
        return self.status is TurnStatus.RUNNING

    def is_finished(self) -> bool:
        return self.status is TurnStatus.FINISHED

    def num_solved(self) -> int:
        return len(self.solved_clues)

    def recap(self) -> str:
        """The solved clue texts, one per line."""
        return "\n".join(f"    {c.text}" for c in self.solved_clues)
