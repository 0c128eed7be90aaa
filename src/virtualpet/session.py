from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, Optional

from .catalog import Catalog
from .inventory import Inventory
from .pet import Command, Pet, available_commands
from .scheduler import DeclineScheduler
from .settings import Settings

logger = logging.getLogger(__name__)


def _wall_clock() -> int:
    return int(time.time())


class GameSession:
    """One pet, its owner's inventory, and the scheduler that ages the pet.

    Player actions and scheduler ticks share one re-entrant lock. Every action
    first checks what the pet's current state allows and returns False when
    the command is refused, leaving pet and inventory unchanged.

    ``clock`` returns whole seconds and drives the vet and play cooldowns.
    """

    def __init__(
        self,
        pet: Pet,
        inventory: Inventory,
        catalog: Catalog,
        settings: Optional[Settings] = None,
        clock: Callable[[], int] = _wall_clock,
        total_play_time: int = 0,
    ) -> None:
        self.pet = pet
        self.inventory = inventory
        self.catalog = catalog
        self.settings = settings or Settings()
        self.clock = clock
        self.total_play_time = total_play_time
        self.lock = threading.RLock()
        self.scheduler = DeclineScheduler(
            pet,
            interval=self.settings.simulation.tick_interval,
            lock=self.lock,
        )

    # ---------------------- Lifecycle ----------------------
    def start(self) -> None:
        self.scheduler.start()

    def stop(self) -> None:
        # Must not hold self.lock here: stop() joins the ticking thread.
        self.scheduler.stop()

    def tick(self, n: int = 1) -> int:
        """Advance the decline clock ``n`` times synchronously; returns steps taken."""
        if n < 0:
            raise ValueError("n cannot be negative")
        return sum(1 for _ in range(n) if self.scheduler.tick())

    # ---------------------- Actions ----------------------
    def allows(self, command: Command) -> bool:
        return command in available_commands(self.pet.state)

    def _refused(self, command: Command) -> bool:
        if self.allows(command):
            return False
        logger.info("%s refused while %s is %s", command.value, self.pet.name, self.pet.state.value)
        return True

    def feed(self, food_name: str) -> bool:
        with self.lock:
            if self._refused(Command.FEED):
                return False
            food = self.catalog.get_food(food_name)
            if food is None:
                logger.info("Unknown food %r", food_name)
                return False
            return self.inventory.feed(self.pet, food)

    def play(self, toy_name: str) -> bool:
        with self.lock:
            if self._refused(Command.PLAY):
                return False
            toy = self.catalog.get_toy(toy_name)
            if toy is None:
                logger.info("Unknown toy %r", toy_name)
                return False
            return self.inventory.play(self.pet, toy, now=self.clock())

    def gift(self) -> bool:
        with self.lock:
            if self._refused(Command.GIFT):
                return False
            return self.inventory.give_gift(self.pet)

    def exercise(self) -> bool:
        with self.lock:
            if self._refused(Command.EXERCISE):
                return False
            self.inventory.exercise(self.pet)
            return True

    def visit_vet(self) -> bool:
        with self.lock:
            if self._refused(Command.VET):
                return False
            return self.inventory.visit_vet(self.pet, self.clock())

    def sleep(self) -> bool:
        with self.lock:
            if self._refused(Command.SLEEP):
                return False
            self.pet.set_sleeping(True)
            return True

    def buy(self, name: str, qty: int = 1, kind: Optional[str] = None) -> bool:
        """Shopping is open in every pet state, including death."""
        with self.lock:
            return self.catalog.buy(name, self.inventory, qty=qty, kind=kind)

    # ---------------------- Presentation ----------------------
    def snapshot(self) -> Dict[str, Any]:
        with self.lock:
            pet = self.pet
            now = self.clock()
            return {
                "name": pet.name,
                "pet_type": pet.pet_type,
                "state": pet.state.value,
                "stats": {
                    "health": pet.health,
                    "sleep": pet.sleep,
                    "fullness": pet.fullness,
                    "happiness": pet.happiness,
                },
                "max": {
                    "health": pet.max_health,
                    "sleep": pet.max_sleep,
                    "fullness": pet.max_fullness,
                    "happiness": pet.max_happiness,
                },
                "warnings": sorted(
                    stat
                    for stat, warn in (
                        ("health", pet.is_warning_health()),
                        ("sleep", pet.is_warning_sleep()),
                        ("fullness", pet.is_warning_fullness()),
                        ("happiness", pet.is_warning_happiness()),
                    )
                    if warn
                ),
                "outfit": pet.current_outfit,
                "commands": sorted(c.value for c in available_commands(pet.state)),
                "cooldowns": {
                    "vet": pet.vet_cooldown_remaining(now),
                    "play": pet.play_cooldown_remaining(now),
                },
                "coins": self.inventory.coins,
                "food": {f.name: n for f, n in self.inventory.food.items()},
                "toys": {t.name: n for t, n in self.inventory.toys.items()},
                "outfits": self.inventory.outfits,
                "total_play_time": self.total_play_time,
            }


def new_game(
    name: str,
    pet_type: str,
    catalog: Catalog,
    settings: Optional[Settings] = None,
    clock: Callable[[], int] = _wall_clock,
) -> GameSession:
    """Start a fresh game: full-stat pet plus the configured starting inventory."""
    settings = settings or Settings()
    pet = Pet.new(
        name,
        pet_type,
        max_stat=settings.simulation.max_stat,
        vet_cooldown=settings.cooldowns.vet,
        play_cooldown=settings.cooldowns.play,
    )
    economy = settings.economy
    inventory = Inventory(coins=economy.starting_coins, rules=economy)
    for food_name, qty in economy.starting_food.items():
        food = catalog.get_food(food_name)
        if food is None:
            logger.warning("Starting food %r is not in the catalog; skipped", food_name)
            continue
        inventory.add_food(food, qty)
    for toy_name, qty in economy.starting_toys.items():
        toy = catalog.get_toy(toy_name)
        if toy is None:
            logger.warning("Starting toy %r is not in the catalog; skipped", toy_name)
            continue
        inventory.add_toy(toy, qty)
    logger.info("New game: %s the %s", name, pet_type)
    return GameSession(pet, inventory, catalog, settings, clock=clock)
