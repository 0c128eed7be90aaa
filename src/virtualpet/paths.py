from __future__ import annotations

import logging
import os
from pathlib import Path

from platformdirs import PlatformDirs

logger = logging.getLogger(__name__)

APP_NAME = "VirtualPet"

# Environment variable overrides (useful for tests and power users)
ENV_CONFIG_DIR = "VP_CONFIG_DIR"
ENV_SAVE_DIR = "VP_SAVE_DIR"


class AppPaths:
    """Resolve platform-appropriate directories for the game.

    - config_dir: settings overrides and the guardian ledger
    - save_dir: one JSON save file per pet

    Uses platformdirs; each directory can be redirected with an environment
    variable.
    """

    def __init__(self, app_name: str = APP_NAME) -> None:
        self._dirs = PlatformDirs(appname=app_name, appauthor=False)
        self._config_dir = self._compute_dir(ENV_CONFIG_DIR, Path(self._dirs.user_config_dir))
        self._save_dir = self._compute_dir(ENV_SAVE_DIR, Path(self._dirs.user_data_dir) / "saves")

    @staticmethod
    def _compute_dir(env_var: str, default: Path) -> Path:
        override = os.getenv(env_var)
        if override:
            return Path(override).expanduser().resolve()
        return Path(default).expanduser().resolve()

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    @property
    def save_dir(self) -> Path:
        return self._save_dir

    @property
    def guardian_file(self) -> Path:
        return self._config_dir / "guardian.json"

    @property
    def settings_file(self) -> Path:
        return self._config_dir / "settings.yaml"

    def ensure_dirs(self) -> None:
        for d in (self.config_dir, self.save_dir):
            d.mkdir(parents=True, exist_ok=True)
        logger.debug("Using config_dir=%s save_dir=%s", self.config_dir, self.save_dir)
