"""Virtual pet simulation core: pets, shop catalog, inventory, saves and a guardian ledger."""

from .catalog import Catalog
from .inventory import Inventory
from .items import Food, Gift, Item, Toy
from .pet import Command, Pet, PetState, available_commands
from .session import GameSession, new_game
from .settings import Settings

__all__ = [
    "Catalog",
    "Command",
    "Food",
    "GameSession",
    "Gift",
    "Inventory",
    "Item",
    "Pet",
    "PetState",
    "Settings",
    "Toy",
    "available_commands",
    "new_game",
]

__version__ = "0.1.0"
