from __future__ import annotations

from dataclasses import dataclass

from ..inventory import Inventory
from ..pet import Pet

# Increment when making breaking schema changes
SCHEMA_VERSION = 1


@dataclass
class GameData:
    """Everything a save file holds: the pet, the player's inventory and the
    accumulated play time in milliseconds."""

    pet: Pet
    inventory: Inventory
    total_play_time: int = 0
    schema_version: int = SCHEMA_VERSION

    def __post_init__(self) -> None:
        if self.total_play_time < 0:
            raise ValueError("total_play_time cannot be negative")
