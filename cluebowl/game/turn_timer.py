from __future__ import annotations

from dataclasses import dataclass

from mashumaro.mixins.json import DataClassJSONMixin

TICKS_PER_SECOND = 20
TICK_MS = 1000 // TICKS_PER_SECOND


@dataclass
class TurnTimer(DataClassJSONMixin):
    """One-shot per-turn countdown (ticks at 20/s), tagged with the turn token it was armed for."""
    ticks_remaining: int = 0
    token: str | None = None

    def start(self, duration_ms: int, token: str) -> None:
        self.ticks_remaining = max(1, -(-max(0, duration_ms) // TICK_MS))
        self.token = token

    def clear(self) -> None:
        self.ticks_remaining = 0
        self.token = None

    @property
    def armed(self) -> bool:
        return self.ticks_remaining > 0

    def tick(self) -> bool:
        if self.ticks_remaining <= 0:
            return False
        self.ticks_remaining -= 1
        return self.ticks_remaining == 0

    def seconds_remaining(self) -> int:
        if self.ticks_remaining <= 0:
            return 0
        return (self.ticks_remaining + TICKS_PER_SECOND - 1) // TICKS_PER_SECOND
