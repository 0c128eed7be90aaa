from pathlib import Path

from virtualpet.paths import AppPaths


def test_environment_overrides_are_used(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("VP_CONFIG_DIR", str(tmp_path / "cfg"))
    monkeypatch.setenv("VP_SAVE_DIR", str(tmp_path / "saves"))
    paths = AppPaths()
    assert paths.config_dir == (tmp_path / "cfg").resolve()
    assert paths.save_dir == (tmp_path / "saves").resolve()
    assert paths.guardian_file.name == "guardian.json"
    assert paths.settings_file.parent == paths.config_dir

    paths.ensure_dirs()
    assert paths.config_dir.is_dir()
    assert paths.save_dir.is_dir()


def test_platform_defaults_without_overrides(monkeypatch):
    monkeypatch.delenv("VP_CONFIG_DIR", raising=False)
    monkeypatch.delenv("VP_SAVE_DIR", raising=False)
    paths = AppPaths()
    assert paths.save_dir.name == "saves"
    assert paths.save_dir.is_absolute()
