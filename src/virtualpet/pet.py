from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional

from .errors import UnknownPetTypeError

logger = logging.getLogger(__name__)

MAX_STAT = 100
BASE_DECLINE_RATE = 5
# apply_decline() is driven by a fast scheduler; only every Nth call decays stats.
DECLINE_DIVISOR = 15
DEFAULT_VET_COOLDOWN = 30
DEFAULT_PLAY_COOLDOWN = 20


@dataclass(frozen=True)
class PetType:
    """Decline-rate multipliers for one pet archetype."""

    health: float
    fullness: float
    sleep: float
    happiness: float

    def rates(self, base: int = BASE_DECLINE_RATE) -> Dict[str, int]:
        return {
            "health": _round_half_up(base * self.health),
            "fullness": _round_half_up(base * self.fullness),
            "sleep": _round_half_up(base * self.sleep),
            "happiness": _round_half_up(base * self.happiness),
        }


PET_TYPES: Dict[str, PetType] = {
    "PetOption1": PetType(health=0.5, fullness=0.9, sleep=0.5, happiness=0.5),
    "PetOption2": PetType(health=0.6, fullness=0.4, sleep=0.6, happiness=0.9),
    "PetOption3": PetType(health=0.5, fullness=0.5, sleep=0.9, happiness=0.6),
}

# Each archetype can wear exactly one outfit.
ALLOWED_OUTFITS: Dict[str, str] = {
    "PetOption1": "outfit1",
    "PetOption2": "outfit2",
    "PetOption3": "outfit3",
}


class PetState(str, Enum):
    """Display state, recomputed from the pet on every refresh."""

    DEAD = "dead"
    SLEEPING = "sleeping"
    ANGRY = "angry"
    HUNGRY = "hungry"
    IDLE = "idle"


class Command(str, Enum):
    FEED = "feed"
    PLAY = "play"
    GIFT = "gift"
    EXERCISE = "exercise"
    VET = "vet"
    SLEEP = "sleep"


_ALL_COMMANDS: FrozenSet[Command] = frozenset(Command)

_COMMANDS_BY_STATE: Dict[PetState, FrozenSet[Command]] = {
    PetState.DEAD: frozenset(),
    PetState.SLEEPING: frozenset(),
    PetState.ANGRY: _ALL_COMMANDS - {Command.FEED, Command.VET},
    PetState.HUNGRY: _ALL_COMMANDS,
    PetState.IDLE: _ALL_COMMANDS,
}


def available_commands(state: PetState) -> FrozenSet[Command]:
    """Player commands that may be issued while the pet is in ``state``."""
    return _COMMANDS_BY_STATE[state]


@dataclass
class Pet:
    """A virtual pet with four bounded needs and a small state machine.

    Stats are clamped to ``[0, max]``. ``sleeping`` is the only stored flag;
    hunger, happiness and death are read straight from the stats so they can
    never disagree with them. Decline rates are derived from ``pet_type``.

    Cooldown timestamps use whatever time unit the caller passes in (the game
    uses whole seconds).
    """

    name: str
    pet_type: str
    health: int = MAX_STAT
    sleep: int = MAX_STAT
    fullness: int = MAX_STAT
    happiness: int = MAX_STAT
    max_health: int = MAX_STAT
    max_sleep: int = MAX_STAT
    max_fullness: int = MAX_STAT
    max_happiness: int = MAX_STAT
    sleeping: bool = False
    last_vet_visit_time: int = 0
    vet_cooldown_duration: int = DEFAULT_VET_COOLDOWN
    last_play_time: int = 0
    play_cooldown_duration: int = DEFAULT_PLAY_COOLDOWN
    current_outfit: Optional[str] = None

    health_decline_rate: int = field(init=False, default=0)
    fullness_decline_rate: int = field(init=False, default=0)
    sleep_decline_rate: int = field(init=False, default=0)
    happiness_decline_rate: int = field(init=False, default=0)
    _decline_counter: int = field(init=False, default=0, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.pet_type not in PET_TYPES:
            raise UnknownPetTypeError(f"Unknown pet type: {self.pet_type!r}")
        for stat in ("health", "sleep", "fullness", "happiness"):
            max_value = getattr(self, f"max_{stat}")
            if max_value <= 0:
                raise ValueError(f"max_{stat} must be > 0")
            setattr(self, stat, max(0, min(int(getattr(self, stat)), max_value)))
        if not self.current_outfit:
            self.current_outfit = None
        elif not self._may_wear(self.current_outfit):
            logger.warning(
                "%s (%s) cannot wear %s; dropping outfit", self.name, self.pet_type, self.current_outfit
            )
            self.current_outfit = None
        self._apply_rates(PET_TYPES[self.pet_type])

    @classmethod
    def new(
        cls,
        name: str,
        pet_type: str,
        max_stat: int = MAX_STAT,
        vet_cooldown: int = DEFAULT_VET_COOLDOWN,
        play_cooldown: int = DEFAULT_PLAY_COOLDOWN,
    ) -> "Pet":
        """Create a fresh pet for a new game: every stat full, no outfit."""
        return cls(
            name=name,
            pet_type=pet_type,
            health=max_stat,
            sleep=max_stat,
            fullness=max_stat,
            happiness=max_stat,
            max_health=max_stat,
            max_sleep=max_stat,
            max_fullness=max_stat,
            max_happiness=max_stat,
            vet_cooldown_duration=vet_cooldown,
            play_cooldown_duration=play_cooldown,
        )

    # ---------------------- Stat mutators ----------------------
    def increase_health(self, amount: int) -> int:
        self.health = _raise(self.health, amount, self.max_health)
        return self.health

    def decrease_health(self, amount: int) -> int:
        self.health = _lower(self.health, amount)
        return self.health

    def increase_sleep(self, amount: int) -> int:
        self.sleep = _raise(self.sleep, amount, self.max_sleep)
        return self.sleep

    def decrease_sleep(self, amount: int) -> int:
        self.sleep = _lower(self.sleep, amount)
        return self.sleep

    def increase_fullness(self, amount: int) -> int:
        self.fullness = _raise(self.fullness, amount, self.max_fullness)
        return self.fullness

    def decrease_fullness(self, amount: int) -> int:
        self.fullness = _lower(self.fullness, amount)
        return self.fullness

    def increase_happiness(self, amount: int) -> int:
        self.happiness = _raise(self.happiness, amount, self.max_happiness)
        return self.happiness

    def decrease_happiness(self, amount: int) -> int:
        self.happiness = _lower(self.happiness, amount)
        return self.happiness

    # ---------------------- Derived flags ----------------------
    @property
    def is_dead(self) -> bool:
        return self.health <= 0

    @property
    def is_hungry(self) -> bool:
        return self.fullness <= 0

    @property
    def is_happy(self) -> bool:
        return self.happiness > 0

    @property
    def is_angry(self) -> bool:
        return self.happiness == 0

    @property
    def is_wearing_outfit(self) -> bool:
        return bool(self.current_outfit)

    @property
    def state(self) -> PetState:
        if self.is_dead:
            return PetState.DEAD
        if self.sleeping:
            return PetState.SLEEPING
        if self.is_angry:
            return PetState.ANGRY
        if self.is_hungry:
            return PetState.HUNGRY
        return PetState.IDLE

    def is_warning_health(self) -> bool:
        return self.health <= self.max_health // 4

    def is_warning_sleep(self) -> bool:
        return self.sleep <= self.max_sleep // 4

    def is_warning_fullness(self) -> bool:
        return self.fullness <= self.max_fullness // 4

    def is_warning_happiness(self) -> bool:
        return self.happiness <= self.max_happiness // 4

    # ---------------------- Cooldowns ----------------------
    def vet_cooldown_remaining(self, now: int) -> int:
        return max(self.vet_cooldown_duration - (now - self.last_vet_visit_time), 0)

    def play_cooldown_remaining(self, now: int) -> int:
        return max(self.play_cooldown_duration - (now - self.last_play_time), 0)

    # ---------------------- Type & outfit ----------------------
    @property
    def allowed_outfit(self) -> Optional[str]:
        return ALLOWED_OUTFITS.get(self.pet_type)

    def set_pet_type(self, pet_type: str) -> bool:
        """Switch archetype and recompute decline rates.

        Unknown archetypes are rejected and leave the pet untouched. An outfit
        the new archetype cannot wear is taken off; callers tracking outfit
        ownership should go through ``Inventory.change_pet_type`` instead.
        """
        pet_type_def = PET_TYPES.get(pet_type)
        if pet_type_def is None:
            logger.warning("Invalid pet type %r for pet %s; keeping %s", pet_type, self.name, self.pet_type)
            return False
        self.pet_type = pet_type
        self._apply_rates(pet_type_def)
        if self.current_outfit and not self._may_wear(self.current_outfit):
            logger.info("%s can no longer wear %s", self.name, self.current_outfit)
            self.current_outfit = None
        return True

    def set_outfit(self, outfit_name: Optional[str]) -> bool:
        """Wear ``outfit_name``, or take the outfit off when it is empty/None."""
        if not outfit_name:
            self.current_outfit = None
            return True
        allowed = self.allowed_outfit
        if allowed is None:
            logger.warning("No outfit defined for pet type %s", self.pet_type)
            return False
        if outfit_name.lower() != allowed.lower():
            logger.info("%s (%s) can only wear %s, not %s", self.name, self.pet_type, allowed, outfit_name)
            return False
        self.current_outfit = outfit_name
        return True

    def remove_outfit(self) -> None:
        if self.current_outfit:
            logger.debug("Removing outfit %s from %s", self.current_outfit, self.name)
            self.current_outfit = None

    def set_sleeping(self, sleeping: bool) -> None:
        self.sleeping = bool(sleeping)

    # ---------------------- Simulation ----------------------
    def apply_decline(self) -> bool:
        """Advance the decline clock by one tick.

        Returns True when this call performed a decay step (every
        ``DECLINE_DIVISOR``-th call on a living pet).
        """
        self._decline_counter += 1
        if self._decline_counter % DECLINE_DIVISOR != 0:
            return False
        if self.is_dead:
            return False

        if not self.sleeping:
            self.decrease_fullness(self.fullness_decline_rate)
            self.decrease_sleep(self.sleep_decline_rate)
            # Starvation doubles the happiness loss.
            loss = self.happiness_decline_rate * 2 if self.fullness <= 0 else self.happiness_decline_rate
            self.decrease_happiness(loss)
        else:
            self.increase_sleep(self.sleep_decline_rate)

        if self.is_hungry:
            self.decrease_health(self.health_decline_rate)

        if self.sleep <= 0:
            # Exhaustion makes the pet sick and forces it to rest.
            self.sleep = 0
            self.decrease_health(self.health_decline_rate)
            self.sleeping = True
        elif self.sleep >= self.max_sleep:
            self.sleeping = False

        if self.health <= 0:
            self.health = 0
            logger.info("%s has died", self.name)

        logger.debug(
            "Decline step for %s: health=%d sleep=%d fullness=%d happiness=%d sleeping=%s",
            self.name,
            self.health,
            self.sleep,
            self.fullness,
            self.happiness,
            self.sleeping,
        )
        return True

    def reset_state(self) -> None:
        """Restore every stat to its maximum and wake the pet (used by revival)."""
        self.health = self.max_health
        self.sleep = self.max_sleep
        self.fullness = self.max_fullness
        self.happiness = self.max_happiness
        self.sleeping = False

    def _may_wear(self, outfit_name: str) -> bool:
        allowed = self.allowed_outfit
        return allowed is not None and outfit_name.lower() == allowed.lower()

    def _apply_rates(self, pet_type_def: PetType) -> None:
        rates = pet_type_def.rates()
        self.health_decline_rate = rates["health"]
        self.fullness_decline_rate = rates["fullness"]
        self.sleep_decline_rate = rates["sleep"]
        self.happiness_decline_rate = rates["happiness"]


def _raise(value: int, amount: int, upper: int) -> int:
    if amount < 0:
        raise ValueError("amount cannot be negative")
    return min(value + amount, upper)


def _lower(value: int, amount: int) -> int:
    if amount < 0:
        raise ValueError("amount cannot be negative")
    return max(value - amount, 0)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
