from __future__ import annotations

import logging
import math
from typing import Dict, Mapping, Optional

from .items import Food, Gift, Toy
from .pet import Pet
from .settings import EconomySettings

logger = logging.getLogger(__name__)


class Inventory:
    """The player's coins and belongings, plus the actions that spend them.

    Quantity maps are keyed by catalog items; because items compare by name,
    ``food_count(Food("Orange"))`` finds the catalog's Orange. Outfits are
    tracked separately by name: ``True`` means owned and available, ``False``
    means owned and currently worn.

    Entries whose count drops to zero are kept; lookups of absent items
    return 0.
    """

    def __init__(
        self,
        coins: int = 0,
        food: Optional[Mapping[Food, int]] = None,
        toys: Optional[Mapping[Toy, int]] = None,
        gifts: Optional[Mapping[Gift, int]] = None,
        outfits: Optional[Mapping[str, bool]] = None,
        rules: Optional[EconomySettings] = None,
    ) -> None:
        if coins < 0:
            raise ValueError("coins cannot be negative")
        self._coins = int(coins)
        self._food: Dict[Food, int] = dict(food or {})
        self._toys: Dict[Toy, int] = dict(toys or {})
        self._gifts: Dict[Gift, int] = dict(gifts or {})
        self._outfits: Dict[str, bool] = dict(outfits or {})
        self.rules = rules or EconomySettings()

    # ---------------------- Coins ----------------------
    @property
    def coins(self) -> int:
        return self._coins

    def can_afford(self, cost: int) -> bool:
        return 0 <= cost <= self._coins

    def earn(self, amount: int, reason: str = "reward") -> int:
        if amount < 0:
            raise ValueError("Cannot earn a negative amount; use spend()")
        self._coins += amount
        logger.debug("Coins +%d (reason=%s); total=%d", amount, reason, self._coins)
        return self._coins

    def spend(self, amount: int, reason: str = "purchase") -> bool:
        """Debit ``amount`` coins. Returns False, untouched, if it would go negative."""
        if not self.can_afford(amount):
            logger.info("Cannot spend %d coins (reason=%s); only %d available", amount, reason, self._coins)
            return False
        self._coins -= amount
        logger.debug("Coins -%d (reason=%s); total=%d", amount, reason, self._coins)
        return True

    # ---------------------- Holdings ----------------------
    @property
    def food(self) -> Mapping[Food, int]:
        return dict(self._food)

    @property
    def toys(self) -> Mapping[Toy, int]:
        return dict(self._toys)

    @property
    def gifts(self) -> Mapping[Gift, int]:
        return dict(self._gifts)

    @property
    def outfits(self) -> Mapping[str, bool]:
        return dict(self._outfits)

    def add_food(self, food: Food, qty: int = 1) -> None:
        self._food[food] = self._food.get(food, 0) + _positive(qty)

    def add_toy(self, toy: Toy, qty: int = 1) -> None:
        self._toys[toy] = self._toys.get(toy, 0) + _positive(qty)

    def add_gift(self, gift: Gift, qty: int = 1) -> None:
        self._gifts[gift] = self._gifts.get(gift, 0) + _positive(qty)

    def add_outfit(self, outfit_name: str) -> None:
        if outfit_name in self._outfits:
            logger.info("Player already owns %s", outfit_name)
            return
        self._outfits[outfit_name] = True

    def food_count(self, food: Food) -> int:
        return self._food.get(food, 0)

    def toy_count(self, toy: Toy) -> int:
        return self._toys.get(toy, 0)

    def gift_count(self, gift: Gift) -> int:
        return self._gifts.get(gift, 0)

    def has_toy(self, toy: Toy) -> bool:
        return self.toy_count(toy) > 0

    def owns_outfit(self, outfit_name: str) -> bool:
        """True only when the outfit is owned and not currently worn."""
        return self._outfits.get(outfit_name, False)

    def consume_food(self, food: Food) -> bool:
        count = self.food_count(food)
        if count <= 0:
            return False
        self._food[food] = count - 1
        return True

    # ---------------------- Pet actions ----------------------
    def feed(self, pet: Pet, food: Food) -> bool:
        """Feed one unit of ``food``; refunds a share of its price."""
        if not self.consume_food(food):
            logger.info("No %s left to feed %s", food.name, pet.name)
            return False
        pet.increase_fullness(food.fullness_restored)
        # Refund is truncated, never rounded up.
        refund = int(math.floor(food.price * self.rules.feed_refund_rate))
        self.earn(refund, reason="feed")
        logger.info("Fed %s to %s (fullness=%d, refund=%d)", food.name, pet.name, pet.fullness, refund)
        return True

    def play(self, pet: Pet, toy: Toy, now: Optional[int] = None) -> bool:
        """Play with an owned toy. Toys are not used up.

        When ``now`` is supplied the pet's play cooldown is enforced.
        """
        if not self.has_toy(toy):
            logger.info("Player does not own toy %s", toy.name)
            return False
        if now is not None:
            remaining = pet.play_cooldown_remaining(now)
            if remaining > 0:
                logger.info("%s must wait %d before playing again", pet.name, remaining)
                return False
            pet.last_play_time = now
        pet.increase_happiness(self.rules.play_happiness)
        self.earn(self.rules.play_reward, reason="play")
        return True

    def visit_vet(self, pet: Pet, now: int) -> bool:
        if now - pet.last_vet_visit_time < pet.vet_cooldown_duration:
            logger.info("%s must wait %d before visiting the vet again", pet.name, pet.vet_cooldown_remaining(now))
            return False
        pet.increase_health(self.rules.vet_health)
        pet.last_vet_visit_time = now
        self.earn(self.rules.vet_reward, reason="vet")
        return True

    def exercise(self, pet: Pet) -> None:
        pet.decrease_sleep(self.rules.exercise_cost)
        pet.decrease_fullness(self.rules.exercise_cost)
        pet.increase_health(self.rules.exercise_health)
        self.earn(self.rules.exercise_reward, reason="exercise")

    def give_gift(self, pet: Pet) -> bool:
        """Toggle the pet's outfit; dressing it up makes it fully happy."""
        if pet.is_wearing_outfit:
            self.unequip_outfit(pet)
            return True
        outfit = pet.allowed_outfit
        if outfit is None or not self.equip_outfit(outfit, pet):
            return False
        pet.increase_happiness(pet.max_happiness)
        self.earn(self.rules.gift_reward, reason="gift")
        return True

    # ---------------------- Outfits ----------------------
    def equip_outfit(self, outfit_name: str, pet: Pet) -> bool:
        if not self.owns_outfit(outfit_name):
            logger.info("Player does not own outfit %s", outfit_name)
            return False
        allowed = pet.allowed_outfit
        if allowed is None or allowed.lower() != outfit_name.lower():
            logger.info("%s cannot wear %s", pet.name, outfit_name)
            return False
        if pet.is_wearing_outfit:
            self.unequip_outfit(pet)
        pet.set_outfit(outfit_name)
        self._outfits[outfit_name] = False
        logger.info("Equipped outfit %s on %s", outfit_name, pet.name)
        return True

    def change_pet_type(self, pet: Pet, pet_type: str) -> bool:
        """Switch the pet's archetype, returning an outfit it can no longer wear."""
        worn = pet.current_outfit
        if not pet.set_pet_type(pet_type):
            return False
        if worn and pet.current_outfit is None:
            self._outfits[worn] = True
        return True

    def unequip_outfit(self, pet: Pet) -> None:
        current = pet.current_outfit
        if not current:
            logger.debug("No outfit to unequip on %s", pet.name)
            return
        pet.set_outfit(None)
        self._outfits[current] = True


def _positive(qty: int) -> int:
    if qty <= 0:
        raise ValueError("quantity must be a positive integer")
    return int(qty)
