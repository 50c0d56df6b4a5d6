from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from mashumaro.mixins.json import DataClassJSONMixin

from .clue import Clue

logger = logging.getLogger(__name__)


@dataclass
class Bowl(DataClassJSONMixin):
    """
    The shared pool of clues for one game.

    Every clue lives in exactly one place at a time: ``unsolved``, ``solved``,
    or with the active turn. Clues are moved between places, never copied, so
    ``num_clues()`` only drops while a turn holds one.
    """

    unsolved: list[Clue] = field(default_factory=list)
    solved: list[Clue] = field(default_factory=list)

    def add_clue(self, clue: Clue) -> None:
        self.unsolved.append(clue)
        logger.info("Added clue: %s", clue)

    def shuffle(self) -> None:
        random.shuffle(self.unsolved)

    def draw(self) -> Clue | None:
        """Take the top clue off the unsolved pile, or None when it is empty."""
        if not self.unsolved:
            return None
        return self.unsolved.pop()

    def put_back(self, clue: Clue | None) -> None:
        """Return an unsolved clue and reshuffle so it isn't the next draw."""
        if clue is None:
            return
        self.unsolved.append(clue)
        self.shuffle()

    def make_solved(self, clue: Clue) -> None:
        self.solved.append(clue)

    def put_all_back(self) -> None:
        """Move every solved clue back into the unsolved pile (unshuffled)."""
        while self.solved:
            self.unsolved.append(self.solved.pop())

    def num_clues(self) -> int:
        return len(self.unsolved) + len(self.solved)

    def num_unsolved(self) -> int:
        return len(self.unsolved)

    def clues_from(self, author_id: str) -> list[Clue]:
        """All clues entered by one author, unsolved first."""
        return [c for c in self.unsolved if c.author_id == author_id] + [
            c for c in self.solved if c.author_id == author_id
        ]

    def summary(self) -> str:
        return f"{self.num_unsolved()} out of {self.num_clues()} remain unsolved"
