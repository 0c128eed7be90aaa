from pathlib import Path

import pytest

from virtualpet.guardian import GuardianLedger, GuardianStore
from virtualpet.pet import Pet


def test_authenticate_with_default_password():
    ledger = GuardianLedger()
    assert ledger.authenticate("1234")
    assert not ledger.authenticate("0000")


def test_play_window_is_half_open():
    ledger = GuardianLedger()
    ledger.set_play_time_window(9, 17)
    assert ledger.is_play_allowed(3)
    ledger.set_limitations_enabled(True)
    assert ledger.is_play_allowed(9)
    assert ledger.is_play_allowed(16)
    assert not ledger.is_play_allowed(17)
    assert not ledger.is_play_allowed(8)

    ledger.reset_play_time_restrictions()
    assert ledger.is_play_allowed(3)
    assert (ledger.allowed_start_hour, ledger.allowed_end_hour) == (0, 24)


def test_window_hours_validated():
    with pytest.raises(ValueError):
        GuardianLedger().set_play_time_window(-1, 10)
    with pytest.raises(ValueError):
        GuardianLedger().set_play_time_window(8, 25)


def test_session_statistics():
    ledger = GuardianLedger()
    assert ledger.average_play_time == 0
    ledger.update_after_session(1000)
    ledger.update_after_session(2001)
    assert ledger.total_play_time == 3001
    assert ledger.session_count == 2
    assert ledger.average_play_time == 1500
    ledger.reset_stats()
    assert ledger.average_play_time == 0


def test_revive_only_dead_pets():
    ledger = GuardianLedger()
    alive = Pet(name="Rex", pet_type="PetOption1", health=5, fullness=0)
    assert ledger.revive_pet(alive) is False
    assert alive.health == 5

    dead = Pet(name="Rex", pet_type="PetOption1", health=0, fullness=0, sleeping=True)
    assert ledger.revive_pet(dead) is True
    assert (dead.health, dead.fullness, dead.sleeping) == (100, 100, False)


def test_store_round_trip(tmp_path: Path):
    store = GuardianStore(tmp_path / "cfg" / "guardian.json")
    ledger = GuardianLedger(password="abcd", limitations_enabled=True, allowed_start_hour=7)
    ledger.update_after_session(500)
    store.save(ledger)
    assert store.load() == ledger


def test_store_falls_back_to_defaults(tmp_path: Path):
    path = tmp_path / "guardian.json"
    assert GuardianStore(path).load() == GuardianLedger()
    path.write_text("{not json", encoding="utf-8")
    assert GuardianStore(path).load() == GuardianLedger()
