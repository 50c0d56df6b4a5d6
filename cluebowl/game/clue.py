from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from mashumaro.mixins.json import DataClassJSONMixin

if TYPE_CHECKING:
    from ..users.base import User


@dataclass(frozen=True)
class Clue(DataClassJSONMixin):
    """A piece of text submitted by a player, drawn and shown to a performer."""

    author_id: str
    author_name: str
    text: str

    @classmethod
    def from_user(cls, user: User, text: str) -> Clue:
        return cls(author_id=user.uuid, author_name=user.username, text=text)

    def __str__(self) -> str:
        return f'"{self.text}" added by {self.author_name}'

    def show_to(self, user: User) -> None:
        """Privately reveal this clue to a single viewer."""
        user.speak_l("clue-reveal", text=self.text)
