from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Mapping, Optional, TypeVar

from ..catalog import Catalog
from ..errors import UnknownPetTypeError
from ..inventory import Inventory
from ..items import Item
from ..pet import Pet
from ..settings import EconomySettings
from .errors import SaveValidationError
from .models import SCHEMA_VERSION, GameData

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Item)


def encode_game(data: GameData) -> str:
    """Encode GameData to a pretty-printed JSON string."""
    doc = {
        "schema_version": data.schema_version,
        "pet": pet_to_dict(data.pet),
        "inventory": inventory_to_dict(data.inventory),
        "total_play_time": data.total_play_time,
    }
    return json.dumps(doc, ensure_ascii=False, sort_keys=True, indent=2)


def decode_game(text: str, catalog: Catalog, rules: Optional[EconomySettings] = None) -> GameData:
    """Decode JSON text into GameData, resolving item names against ``catalog``."""
    try:
        doc: Dict[str, Any] = json.loads(text)
    except json.JSONDecodeError as e:
        raise SaveValidationError(f"Invalid JSON: {e}") from e
    if not isinstance(doc, dict):
        raise SaveValidationError("Save document must be a JSON object")

    try:
        version = int(doc.get("schema_version", SCHEMA_VERSION))
    except (TypeError, ValueError) as e:
        raise SaveValidationError(f"Invalid schema_version: {doc.get('schema_version')!r}") from e
    if version != SCHEMA_VERSION:
        doc = migrate_data(doc, from_version=version, to_version=SCHEMA_VERSION)

    try:
        pet = pet_from_dict(doc["pet"])
        inventory = inventory_from_dict(doc["inventory"], catalog, rules)
        return GameData(pet=pet, inventory=inventory, total_play_time=int(doc.get("total_play_time", 0)))
    except SaveValidationError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError, UnknownPetTypeError) as e:
        raise SaveValidationError(f"Malformed save data: {e!r}") from e


def migrate_data(data: Dict[str, Any], from_version: int, to_version: int) -> Dict[str, Any]:
    """Migrate data between schema versions.

    Currently SCHEMA_VERSION=1, so no migrations are performed.
    """
    if from_version == to_version:
        return data
    if from_version > to_version:
        raise SaveValidationError(
            f"Save schema version {from_version} is newer than supported {to_version}."
        )
    data["schema_version"] = to_version
    return data


# ---------------------- Pet ----------------------
def pet_to_dict(pet: Pet) -> Dict[str, Any]:
    return {
        "name": pet.name,
        "pet_type": pet.pet_type,
        "health": pet.health,
        "sleep": pet.sleep,
        "fullness": pet.fullness,
        "happiness": pet.happiness,
        "max_health": pet.max_health,
        "max_sleep": pet.max_sleep,
        "max_fullness": pet.max_fullness,
        "max_happiness": pet.max_happiness,
        "health_decline_rate": pet.health_decline_rate,
        "fullness_decline_rate": pet.fullness_decline_rate,
        "sleep_decline_rate": pet.sleep_decline_rate,
        "happiness_decline_rate": pet.happiness_decline_rate,
        "is_sleeping": pet.sleeping,
        "is_hungry": pet.is_hungry,
        "is_happy": pet.is_happy,
        "is_dead": pet.is_dead,
        "last_vet_visit_time": pet.last_vet_visit_time,
        "vet_cooldown_duration": pet.vet_cooldown_duration,
        "last_play_time": pet.last_play_time,
        "play_cooldown_duration": pet.play_cooldown_duration,
        "current_outfit": pet.current_outfit,
    }


def pet_from_dict(data: Mapping[str, Any]) -> Pet:
    """Rebuild a Pet.

    Decline rates and the hungry/happy/dead flags are written for readability
    only; they are recomputed from the archetype and the stats.
    """
    outfit = data.get("current_outfit")
    return Pet(
        name=str(data["name"]),
        pet_type=str(data["pet_type"]),
        health=int(data["health"]),
        sleep=int(data["sleep"]),
        fullness=int(data["fullness"]),
        happiness=int(data["happiness"]),
        max_health=int(data["max_health"]),
        max_sleep=int(data["max_sleep"]),
        max_fullness=int(data["max_fullness"]),
        max_happiness=int(data["max_happiness"]),
        sleeping=bool(data.get("is_sleeping", False)),
        last_vet_visit_time=int(data.get("last_vet_visit_time", 0)),
        vet_cooldown_duration=int(data["vet_cooldown_duration"]),
        last_play_time=int(data.get("last_play_time", 0)),
        play_cooldown_duration=int(data["play_cooldown_duration"]),
        current_outfit=str(outfit) if outfit else None,
    )


# ---------------------- Inventory ----------------------
def inventory_to_dict(inventory: Inventory) -> Dict[str, Any]:
    return {
        "coins": inventory.coins,
        "food": _names_to_counts(inventory.food),
        "toys": _names_to_counts(inventory.toys),
        "gifts": _names_to_counts(inventory.gifts),
        "outfits": dict(inventory.outfits),
    }


def inventory_from_dict(
    data: Mapping[str, Any], catalog: Catalog, rules: Optional[EconomySettings] = None
) -> Inventory:
    """Rebuild an Inventory whose keys are the catalog's own item objects.

    Entries naming an item the catalog no longer carries are dropped.
    """
    outfits = data.get("outfits") or {}
    if not isinstance(outfits, dict):
        raise SaveValidationError("inventory.outfits must be an object")
    for outfit_name, available in outfits.items():
        if not isinstance(available, bool):
            raise SaveValidationError(f"inventory.outfits[{outfit_name!r}] must be true or false")
    return Inventory(
        coins=int(data.get("coins", 0)),
        food=_resolve(data.get("food"), catalog.get_food, "food"),
        toys=_resolve(data.get("toys"), catalog.get_toy, "toy"),
        gifts=_resolve(data.get("gifts"), catalog.get_gift, "gift"),
        outfits={str(k): v for k, v in outfits.items()},
        rules=rules,
    )


def _names_to_counts(counts: Mapping[Item, int]) -> Dict[str, int]:
    return {item.name: count for item, count in counts.items()}


def _resolve(raw: Any, lookup: Callable[[str], Optional[T]], kind: str) -> Dict[T, int]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise SaveValidationError(f"inventory {kind} map must be an object")
    resolved: Dict[T, int] = {}
    for name, count in raw.items():
        item = lookup(name)
        if item is None:
            logger.warning("Unknown %s item in save file: %s", kind, name)
            continue
        count = int(count)
        if count < 0:
            raise SaveValidationError(f"Negative count for {kind} '{name}'")
        resolved[item] = count
    return resolved
