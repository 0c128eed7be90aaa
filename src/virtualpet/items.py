from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Item:
    """Base shop item.

    Items are immutable descriptors keyed by ``name``. Equality and hashing use
    the name alone (plus the concrete class), so an Item rebuilt from a save
    file compares equal to the catalog entry it names. Quantities live in the
    Inventory, never on the item.
    """

    name: str
    price: int = field(default=0, compare=False)

    @property
    def kind(self) -> str:
        return "item"


@dataclass(frozen=True)
class Food(Item):
    fullness_restored: int = field(default=0, compare=False)
    description: str = field(default="", compare=False)

    @property
    def kind(self) -> str:
        return "food"


@dataclass(frozen=True)
class Toy(Item):
    description: str = field(default="", compare=False)

    @property
    def kind(self) -> str:
        return "toy"


@dataclass(frozen=True)
class Gift(Item):
    """A wearable gift. The name doubles as the outfit identifier."""

    @property
    def kind(self) -> str:
        return "gift"

    @property
    def outfit_name(self) -> str:
        return self.name
