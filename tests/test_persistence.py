import json
from pathlib import Path

import pytest

from virtualpet.inventory import Inventory
from virtualpet.persistence import (
    SCHEMA_VERSION,
    GameData,
    SaveManager,
    SaveNameConflict,
    SaveSlotsFull,
    SaveValidationError,
    decode_game,
    encode_game,
)
from virtualpet.pet import Pet


def sample_game(catalog) -> GameData:
    pet = Pet(
        name="Rex",
        pet_type="PetOption3",
        health=80,
        sleep=12,
        fullness=0,
        happiness=33,
        sleeping=True,
        last_vet_visit_time=1234,
        last_play_time=99,
        current_outfit="outfit3",
    )
    inv = Inventory(
        coins=420,
        food={catalog.get_food("Orange"): 3, catalog.get_food("Chicken"): 0},
        toys={catalog.get_toy("Guitar"): 1},
        gifts={catalog.get_gift("outfit3"): 1},
        outfits={"outfit3": False},
    )
    return GameData(pet=pet, inventory=inv, total_play_time=5000)


def test_round_trip_restores_state_and_catalog_identity(catalog):
    original = sample_game(catalog)
    loaded = decode_game(encode_game(original), catalog)

    assert loaded.pet == original.pet
    assert loaded.pet.sleeping is True
    assert loaded.pet.current_outfit == "outfit3"
    assert loaded.total_play_time == 5000
    assert loaded.inventory.coins == 420
    assert loaded.inventory.food == original.inventory.food
    assert loaded.inventory.toys == original.inventory.toys
    assert loaded.inventory.outfits == {"outfit3": False}
    for food in loaded.inventory.food:
        assert food is catalog.get_food(food.name)
    for toy in loaded.inventory.toys:
        assert toy is catalog.get_toy(toy.name)
    for gift in loaded.inventory.gifts:
        assert gift is catalog.get_gift(gift.name)


def test_encoded_document_layout(catalog):
    doc = json.loads(encode_game(sample_game(catalog)))
    assert doc["schema_version"] == SCHEMA_VERSION
    assert doc["inventory"]["food"] == {"Orange": 3, "Chicken": 0}
    assert doc["pet"]["is_hungry"] is True
    assert doc["pet"]["is_dead"] is False
    assert doc["pet"]["sleep_decline_rate"] == 5


def test_rates_and_flags_are_recomputed_on_load(catalog):
    doc = json.loads(encode_game(sample_game(catalog)))
    doc["pet"]["health_decline_rate"] = 99
    doc["pet"]["is_dead"] = True
    loaded = decode_game(json.dumps(doc), catalog)
    assert loaded.pet.health_decline_rate == 3
    assert loaded.pet.is_dead is False


def test_unknown_items_are_dropped(catalog):
    doc = json.loads(encode_game(sample_game(catalog)))
    doc["inventory"]["food"]["Mystery Meat"] = 4
    doc["inventory"]["toys"]["Yo-yo"] = 1
    loaded = decode_game(json.dumps(doc), catalog)
    assert {f.name for f in loaded.inventory.food} == {"Orange", "Chicken"}
    assert {t.name for t in loaded.inventory.toys} == {"Guitar"}


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[]",
        json.dumps({"schema_version": SCHEMA_VERSION, "inventory": {}}),
        json.dumps({"schema_version": SCHEMA_VERSION + 1, "pet": {}, "inventory": {}}),
        json.dumps({"schema_version": None, "pet": {}, "inventory": {}}),
        json.dumps({"schema_version": "x", "pet": {}, "inventory": {}}),
        json.dumps({"schema_version": [1], "pet": {}, "inventory": {}}),
    ],
)
def test_malformed_documents_rejected(catalog, text):
    with pytest.raises(SaveValidationError):
        decode_game(text, catalog)


def test_negative_counts_rejected(catalog):
    doc = json.loads(encode_game(sample_game(catalog)))
    doc["inventory"]["food"]["Orange"] = -1
    with pytest.raises(SaveValidationError):
        decode_game(json.dumps(doc), catalog)


def test_manager_save_and_load(tmp_path: Path, catalog):
    mgr = SaveManager(tmp_path, catalog)
    game = sample_game(catalog)
    mgr.save(game.pet, game.inventory)

    assert (tmp_path / "Rex.json").exists()
    loaded = mgr.load("Rex")
    assert loaded is not None
    assert loaded.pet == game.pet
    assert loaded.inventory.food_count(catalog.get_food("Orange")) == 3


def test_missing_or_corrupt_save_loads_as_none(tmp_path: Path, catalog):
    mgr = SaveManager(tmp_path, catalog)
    assert mgr.load("Ghost") is None
    (tmp_path / "Ghost.json").write_text("{broken", encoding="utf-8")
    assert mgr.load("Ghost") is None


def test_recovers_from_backup(tmp_path: Path, catalog):
    mgr = SaveManager(tmp_path, catalog)
    game = sample_game(catalog)
    mgr.save(game.pet, game.inventory)
    game.pet.increase_health(5)
    mgr.save(game.pet, game.inventory)

    (tmp_path / "Rex.json").write_text("garbage", encoding="utf-8")
    loaded = mgr.load("Rex")
    assert loaded is not None
    assert loaded.pet.health == 80


def test_slot_limit(tmp_path: Path, catalog):
    mgr = SaveManager(tmp_path, catalog)
    for name in ("A", "B", "C"):
        mgr.create(Pet.new(name, "PetOption1"), Inventory())
    assert not mgr.can_create_new_game()
    with pytest.raises(SaveSlotsFull):
        mgr.create(Pet.new("D", "PetOption1"), Inventory())
    # Overwriting an existing pet does not need a free slot.
    mgr.create(Pet.new("A", "PetOption2"), Inventory())
    assert [p.stem for p in mgr.list_saves()] == ["A", "B", "C"]


def test_play_time_accumulates(tmp_path: Path, catalog):
    now = [0.0]
    mgr = SaveManager(tmp_path, catalog, clock=lambda: now[0])
    pet = Pet.new("Rex", "PetOption1")
    mgr.create(pet, Inventory())
    now[0] = 2.5
    data = mgr.save(pet, Inventory(), previous_play_time=1000)
    assert data.total_play_time == 3500
    assert mgr.load("Rex").total_play_time == 3500


def test_save_inventory_keeps_pet(tmp_path: Path, catalog):
    mgr = SaveManager(tmp_path, catalog)
    game = sample_game(catalog)
    mgr.save(game.pet, game.inventory, previous_play_time=5000)
    assert mgr.save_inventory("Rex", Inventory(coins=7)) is True
    loaded = mgr.load("Rex")
    assert loaded.inventory.coins == 7
    assert loaded.pet.health == 80
    assert mgr.save_inventory("Nobody", Inventory()) is False


def test_delete(tmp_path: Path, catalog):
    mgr = SaveManager(tmp_path, catalog)
    mgr.create(Pet.new("Rex", "PetOption1"), Inventory())
    assert mgr.delete("Rex") is True
    assert mgr.delete("Rex") is False
    assert mgr.list_saves() == []


def test_file_names_are_sanitized(tmp_path: Path, catalog):
    mgr = SaveManager(tmp_path, catalog)
    assert mgr.path_for("../evil").parent == tmp_path


def test_outfit_flags_must_be_booleans(catalog):
    doc = json.loads(encode_game(sample_game(catalog)))
    doc["inventory"]["outfits"]["outfit3"] = "false"
    with pytest.raises(SaveValidationError):
        decode_game(json.dumps(doc), catalog)


def test_outfit_not_allowed_for_archetype_is_dropped(catalog):
    doc = json.loads(encode_game(sample_game(catalog)))
    doc["pet"]["current_outfit"] = "outfit1"
    loaded = decode_game(json.dumps(doc), catalog)
    assert loaded.pet.pet_type == "PetOption3"
    assert loaded.pet.current_outfit is None


def test_non_utf8_save_loads_as_none(tmp_path: Path, catalog):
    mgr = SaveManager(tmp_path, catalog)
    (tmp_path / "Rex.json").write_bytes(b"\xff\xfe\x00garbage")
    assert mgr.load("Rex") is None


def test_non_utf8_save_recovers_from_backup(tmp_path: Path, catalog):
    mgr = SaveManager(tmp_path, catalog)
    game = sample_game(catalog)
    mgr.save(game.pet, game.inventory)
    mgr.save(game.pet, game.inventory)
    (tmp_path / "Rex.json").write_bytes(b"\xff\xfe\x00garbage")
    loaded = mgr.load("Rex")
    assert loaded is not None
    assert loaded.pet.name == "Rex"


def test_bad_schema_version_on_disk_loads_as_none(tmp_path: Path, catalog):
    mgr = SaveManager(tmp_path, catalog)
    game = sample_game(catalog)
    mgr.create(game.pet, game.inventory)
    path = tmp_path / "Rex.json"
    doc = json.loads(path.read_text(encoding="utf-8"))
    doc["schema_version"] = None
    path.write_text(json.dumps(doc), encoding="utf-8")
    assert mgr.load("Rex") is None


def test_create_refuses_to_replace_another_pet(tmp_path: Path, catalog):
    mgr = SaveManager(tmp_path, catalog)
    mgr.create(Pet.new("Max?", "PetOption1"), Inventory())
    with pytest.raises(SaveNameConflict):
        mgr.create(Pet.new("Max!", "PetOption2"), Inventory())
    loaded = mgr.load("Max?")
    assert loaded.pet.name == "Max?"
    assert loaded.pet.pet_type == "PetOption1"
