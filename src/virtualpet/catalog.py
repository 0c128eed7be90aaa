from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, Iterable, Mapping, Optional

import yaml

from .errors import CatalogError
from .items import Food, Gift, Item, Toy

if TYPE_CHECKING:  # pragma: no cover
    from .inventory import Inventory

logger = logging.getLogger(__name__)

KIND_FOOD = "food"
KIND_TOY = "toy"
KIND_GIFT = "gift"
KINDS = (KIND_FOOD, KIND_TOY, KIND_GIFT)


class Catalog:
    """Read-only registry of purchasable items, partitioned by kind.

    The catalog is built once per process and shared. Because it is rebuilt
    identically from the same seed data every time, a save file can refer to
    items by name alone and the codec resolves those names back to the entries
    held here.

    Usage:
        catalog = Catalog.load_default()
        catalog.get_food("Orange")
        catalog.buy("Wand", inventory)
    """

    def __init__(
        self,
        foods: Iterable[Food] = (),
        toys: Iterable[Toy] = (),
        gifts: Iterable[Gift] = (),
    ) -> None:
        self._food: Mapping[str, Food] = MappingProxyType(_index(foods, KIND_FOOD))
        self._toys: Mapping[str, Toy] = MappingProxyType(_index(toys, KIND_TOY))
        self._gifts: Mapping[str, Gift] = MappingProxyType(_index(gifts, KIND_GIFT))

    # ---------------------- Construction ----------------------
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Catalog":
        try:
            foods = [
                Food(
                    name=str(it["name"]),
                    price=int(it["price"]),
                    fullness_restored=int(it.get("fullness", 0)),
                    description=str(it.get("description", "")),
                )
                for it in data.get("food") or []
            ]
            toys = [
                Toy(name=str(it["name"]), price=int(it["price"]), description=str(it.get("description", "")))
                for it in data.get("toys") or []
            ]
            gifts = [Gift(name=str(it["name"]), price=int(it["price"])) for it in data.get("gifts") or []]
        except (KeyError, TypeError, ValueError) as exc:
            raise CatalogError(f"Invalid catalog entry: {exc}") from exc
        return cls(foods=foods, toys=toys, gifts=gifts)

    @classmethod
    def load(cls, path: Path) -> "Catalog":
        with Path(path).open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.debug("Loaded catalog seed from %s", path)
        return cls.from_dict(data)

    @classmethod
    def load_default(cls) -> "Catalog":
        """Build the catalog from the seed data packaged with virtualpet."""
        text = resources.files("virtualpet.data").joinpath("catalog.yaml").read_text(encoding="utf-8")
        catalog = cls.from_dict(yaml.safe_load(text) or {})
        logger.debug(
            "Default catalog: %d foods, %d toys, %d gifts",
            len(catalog.foods),
            len(catalog.toys),
            len(catalog.gifts),
        )
        return catalog

    # ---------------------- Lookups ----------------------
    @property
    def foods(self) -> Mapping[str, Food]:
        return self._food

    @property
    def toys(self) -> Mapping[str, Toy]:
        return self._toys

    @property
    def gifts(self) -> Mapping[str, Gift]:
        return self._gifts

    def get_food(self, name: str) -> Optional[Food]:
        return self._food.get(name)

    def get_toy(self, name: str) -> Optional[Toy]:
        return self._toys.get(name)

    def get_gift(self, name: str) -> Optional[Gift]:
        return self._gifts.get(name)

    def has_food(self, name: str) -> bool:
        return name in self._food

    def has_toy(self, name: str) -> bool:
        return name in self._toys

    def has_gift(self, name: str) -> bool:
        return name in self._gifts

    def find(self, name: str, kind: Optional[str] = None) -> Optional[Item]:
        """Return the item called ``name``, searching food, toys, then gifts.

        An unknown ``kind`` finds nothing.
        """
        if kind and kind not in KINDS:
            logger.info("Unknown item kind %r", kind)
            return None
        for k in (kind,) if kind else KINDS:
            partition = self._partition(k)
            if name in partition:
                return partition[name]
        return None

    def _partition(self, kind: str) -> Mapping[str, Any]:
        if kind == KIND_FOOD:
            return self._food
        if kind == KIND_TOY:
            return self._toys
        if kind == KIND_GIFT:
            return self._gifts
        raise ValueError(f"Unknown item kind: {kind!r}")

    # ---------------------- Purchases ----------------------
    def buy(self, name: str, inventory: "Inventory", qty: int = 1, kind: Optional[str] = None) -> bool:
        """Buy ``qty`` of the named item into ``inventory``.

        All-or-nothing: an unknown item or a shortfall in coins leaves the
        inventory untouched and returns False.
        """
        item = self.find(name, kind)
        if isinstance(item, Food):
            return self.buy_food(name, inventory, qty)
        if isinstance(item, Toy):
            return self.buy_toy(name, inventory, qty)
        if isinstance(item, Gift):
            return self.buy_gift(name, inventory, qty)
        logger.info("Purchase failed: unknown item %r", name)
        return False

    def buy_food(self, name: str, inventory: "Inventory", qty: int = 1) -> bool:
        food = self.get_food(name)
        if food is None or qty <= 0:
            logger.info("Purchase failed: food=%r qty=%s", name, qty)
            return False
        total_cost = food.price * qty
        if not inventory.spend(total_cost):
            return False
        inventory.add_food(food, qty)
        logger.info("Purchase complete: %s x%d for %d coins (remaining: %d)", name, qty, total_cost, inventory.coins)
        return True

    def buy_toy(self, name: str, inventory: "Inventory", qty: int = 1) -> bool:
        toy = self.get_toy(name)
        if toy is None or qty <= 0:
            logger.info("Purchase failed: toy=%r qty=%s", name, qty)
            return False
        # Toys cost a flat price regardless of quantity.
        if not inventory.spend(toy.price):
            return False
        inventory.add_toy(toy, qty)
        logger.info("Purchase complete: %s x%d for %d coins (remaining: %d)", name, qty, toy.price, inventory.coins)
        return True

    def buy_gift(self, name: str, inventory: "Inventory", qty: int = 1) -> bool:
        gift = self.get_gift(name)
        if gift is None or qty <= 0:
            logger.info("Purchase failed: gift=%r qty=%s", name, qty)
            return False
        if not inventory.spend(gift.price):
            return False
        inventory.add_gift(gift, qty)
        inventory.add_outfit(gift.outfit_name)
        logger.info("Purchase complete: %s x%d for %d coins (remaining: %d)", name, qty, gift.price, inventory.coins)
        return True


def _index(items: Iterable[Item], kind: str) -> Dict[str, Any]:
    indexed: Dict[str, Any] = {}
    for item in items:
        if not item.name:
            raise CatalogError(f"{kind} entry has an empty name")
        if item.price < 0:
            raise CatalogError(f"{kind} '{item.name}' has a negative price")
        if item.name in indexed:
            raise CatalogError(f"Duplicate {kind} name in catalog: {item.name}")
        indexed[item.name] = item
    return indexed
