import json
import logging
from pathlib import Path

import pytest

from virtualpet import cli
from virtualpet.catalog import Catalog
from virtualpet.guardian import GuardianStore
from virtualpet.inventory import Inventory
from virtualpet.persistence import SaveManager
from virtualpet.pet import Pet


@pytest.fixture()
def run(tmp_path: Path, monkeypatch, capsys):
    monkeypatch.delenv("VP_LOG_LEVEL", raising=False)
    monkeypatch.setenv("VP_CONFIG_DIR", str(tmp_path / "cfg"))
    save_dir = tmp_path / "saves"

    def _run(*argv):
        code = cli.main(["--save-dir", str(save_dir), *argv])
        out = capsys.readouterr().out
        return code, out

    _run.save_dir = save_dir
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield _run
    root.handlers[:] = handlers
    root.setLevel(level)


def test_new_then_status(run):
    code, out = run("new", "Rex", "--type", "PetOption2")
    assert code == 0
    snap = json.loads(out)
    assert snap["pet_type"] == "PetOption2"
    assert snap["coins"] == 6000

    code, out = run("status", "Rex")
    assert code == 0
    assert json.loads(out)["food"] == {"Orange": 5}


def test_list_saves(run):
    run("new", "Rex")
    run("new", "Ada")
    code, out = run("list")
    assert code == 0
    assert out.split() == ["Ada", "Rex"]


def test_slot_limit_exit_code(run):
    for name in ("A", "B", "C"):
        assert run("new", name)[0] == 0
    assert run("new", "D")[0] == 1


def test_actions_are_saved(run):
    run("new", "Rex")
    code, out = run("buy", "Rex", "Swiss Roll", "--qty", "2")
    assert code == 0
    assert json.loads(out)["coins"] == 5600

    code, out = run("tick", "Rex", "--count", "15")
    assert code == 0
    assert json.loads(out)["stats"]["fullness"] == 95

    code, out = run("feed", "Rex", "Swiss Roll")
    assert code == 0
    snap = json.loads(out)
    assert snap["stats"]["fullness"] == 100
    assert snap["food"]["Swiss Roll"] == 1
    assert snap["coins"] == 5650


def test_refused_action_exits_nonzero(run):
    run("new", "Rex")
    assert run("sleep", "Rex")[0] == 0
    code, out = run("exercise", "Rex")
    assert code == 1
    assert json.loads(out)["state"] == "sleeping"


def test_missing_save_exits_nonzero(run):
    assert run("status", "Nobody")[0] == 1


def test_revive(run):
    catalog = Catalog.load_default()
    SaveManager(run.save_dir, catalog).create(Pet(name="Rex", pet_type="PetOption1", health=0), Inventory())

    assert run("revive", "Rex", "--password", "nope")[0] == 1
    code, out = run("revive", "Rex", "--password", "1234")
    assert code == 0
    assert json.loads(out)["stats"]["health"] == 100
    # A living pet cannot be revived again.
    assert run("revive", "Rex", "--password", "1234")[0] == 1


def test_guardian_window_blocks_actions(run, tmp_path: Path):
    run("new", "Rex")
    store = GuardianStore(tmp_path / "cfg" / "guardian.json")
    ledger = store.load()
    ledger.set_limitations_enabled(True)
    ledger.set_play_time_window(0, 0)
    store.save(ledger)

    assert run("exercise", "Rex")[0] == 1
    assert run("status", "Rex")[0] == 0


def test_sessions_are_recorded_for_guardian(run, tmp_path: Path):
    run("new", "Rex")
    run("exercise", "Rex")
    run("tick", "Rex")
    ledger = GuardianStore(tmp_path / "cfg" / "guardian.json").load()
    assert ledger.session_count == 2


def test_new_refuses_name_sharing_a_save_file(run):
    assert run("new", "Max?")[0] == 0
    assert run("new", "Max!", "--type", "PetOption2")[0] == 1
    code, out = run("status", "Max?")
    assert json.loads(out)["pet_type"] == "PetOption1"
