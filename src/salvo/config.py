"""Match configuration."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, field_validator, model_validator

from salvo.engine.ship import STANDARD_FLEET


class MatchConfig(BaseModel):
    """Settings shared by every match in a session."""

    board_size: int = 10
    fleet: tuple[int, ...] = STANDARD_FLEET
    seed: int | None = None
    # Presentation pacing only; the engine never waits.
    computer_delay_ms: int = 0

    @field_validator("board_size")
    @classmethod
    def validate_board_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("board_size must be at least 1")
        return v

    @field_validator("computer_delay_ms")
    @classmethod
    def validate_delay(cls, v: int) -> int:
        if v < 0:
            raise ValueError("computer_delay_ms cannot be negative")
        return v

    @model_validator(mode="after")
    def validate_fleet_fits(self) -> "MatchConfig":
        if not self.fleet:
            raise ValueError("fleet must contain at least one ship")
        for length in self.fleet:
            if length < 1 or length > self.board_size:
                raise ValueError(
                    f"ship length {length} does not fit a {self.board_size}x{self.board_size} board"
                )
        if sum(self.fleet) > self.board_size * self.board_size:
            raise ValueError("fleet occupies more cells than the board has")
        return self

    @classmethod
    def from_env(cls, **overrides: Any) -> "MatchConfig":
        """Construct config from `SALVO_*` env vars; explicit overrides win."""

        data: Dict[str, Any] = {}
        board_size = os.getenv("SALVO_BOARD_SIZE")
        fleet = os.getenv("SALVO_FLEET")
        seed = os.getenv("SALVO_SEED")
        delay = os.getenv("SALVO_COMPUTER_DELAY_MS")
        if board_size:
            data["board_size"] = int(board_size)
        if fleet:
            data["fleet"] = tuple(int(part) for part in fleet.split(",") if part.strip())
        if seed:
            data["seed"] = int(seed)
        if delay:
            data["computer_delay_ms"] = int(delay)
        data.update(overrides)
        return cls(**data)


@lru_cache(maxsize=1)
def load_match_config() -> MatchConfig:
    """Load and cache match config from the environment."""

    return MatchConfig.from_env()
