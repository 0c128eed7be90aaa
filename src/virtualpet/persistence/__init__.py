"""Persistence for virtual pet games.

This package provides:
- GameData, the (pet, inventory, play time) triple stored per save file
- Encoding/decoding to a stable JSON schema with versioning, resolving item
  names back to live catalog entries
- A SaveManager that handles per-pet files, the slot limit, atomic writes and
  backup recovery
"""

from .codec import decode_game, encode_game, inventory_from_dict, inventory_to_dict, pet_from_dict, pet_to_dict
from .errors import CorruptSaveError, SaveError, SaveNameConflict, SaveSlotsFull, SaveValidationError
from .manager import SaveManager
from .models import SCHEMA_VERSION, GameData

__all__ = [
    "SCHEMA_VERSION",
    "GameData",
    "SaveManager",
    "encode_game",
    "decode_game",
    "pet_to_dict",
    "pet_from_dict",
    "inventory_to_dict",
    "inventory_from_dict",
    "SaveError",
    "SaveValidationError",
    "SaveSlotsFull",
    "SaveNameConflict",
    "CorruptSaveError",
]
