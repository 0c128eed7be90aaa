from __future__ import annotations

import logging
import os
import re
import shutil
import threading
import time
from pathlib import Path
from typing import Callable, List, Optional

from ..catalog import Catalog
from ..inventory import Inventory
from ..pet import Pet
from ..settings import Settings
from .codec import decode_game, encode_game
from .errors import CorruptSaveError, SaveError, SaveNameConflict, SaveSlotsFull, SaveValidationError
from .models import GameData

logger = logging.getLogger(__name__)

SAVE_SUFFIX = ".json"
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9 _.-]")


class SaveManager:
    """Reads and writes one JSON save file per pet.

    - Files are named after the pet: ``<save_dir>/<pet name>.json``.
    - At most ``settings.saves.max_slots`` saves may exist.
    - Writes are atomic and keep the previous file as ``.bak``.
    - Saving adds the time elapsed since the session started (or since the
      last save/load) to the stored play time.

    One writer per file: the manager's lock serializes its own saves, and
    callers must not point two managers at the same directory concurrently.
    """

    def __init__(
        self,
        save_dir: Path,
        catalog: Catalog,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.save_dir = Path(save_dir)
        self.catalog = catalog
        self.settings = settings or Settings()
        self.lock = threading.RLock()
        self._clock = clock
        self._session_start = clock()

    # Public API

    @property
    def max_slots(self) -> int:
        return self.settings.saves.max_slots

    def path_for(self, pet_name: str) -> Path:
        stem = _UNSAFE_CHARS.sub("_", pet_name).strip(" .")
        if not stem:
            raise SaveError(f"Cannot build a save file name from {pet_name!r}")
        return self.save_dir / f"{stem}{SAVE_SUFFIX}"

    def list_saves(self) -> List[Path]:
        if not self.save_dir.is_dir():
            return []
        return sorted(p for p in self.save_dir.glob(f"*{SAVE_SUFFIX}") if p.is_file())

    def can_create_new_game(self) -> bool:
        return len(self.list_saves()) < self.max_slots

    def session_elapsed_ms(self) -> int:
        return max(int((self._clock() - self._session_start) * 1000), 0)

    def reset_session_clock(self) -> None:
        self._session_start = self._clock()

    def create(self, pet: Pet, inventory: Inventory) -> Path:
        """Write the first save for a new pet, enforcing the slot limit."""
        with self.lock:
            path = self.path_for(pet.name)
            if path.exists():
                self._check_owner(path, pet.name)
            elif not self.can_create_new_game():
                raise SaveSlotsFull(f"All {self.max_slots} save slots are in use")
            self.reset_session_clock()
            self._write(path, GameData(pet=pet, inventory=inventory, total_play_time=0))
            logger.info("Created new save for %s at %s", pet.name, path)
            return path

    def save(self, pet: Pet, inventory: Inventory, previous_play_time: int = 0) -> GameData:
        """Persist pet and inventory, adding this session's play time."""
        with self.lock:
            path = self.path_for(pet.name)
            data = GameData(
                pet=pet,
                inventory=inventory,
                total_play_time=previous_play_time + self.session_elapsed_ms(),
            )
            self._write(path, data)
            self.reset_session_clock()
            logger.info("Saved %s (play time %d ms)", pet.name, data.total_play_time)
            return data

    def load(self, pet_name: str) -> Optional[GameData]:
        """Load a save; returns None when it is missing or unreadable."""
        with self.lock:
            path = self.path_for(pet_name)
            try:
                data = self._load_with_fallback(path)
            except (SaveError, OSError) as exc:
                logger.error("Error loading game %s: %s", path, exc)
                return None
            self.reset_session_clock()
            return data

    def save_inventory(self, pet_name: str, inventory: Inventory) -> bool:
        """Replace only the inventory of an existing save, keeping pet and play time."""
        with self.lock:
            path = self.path_for(pet_name)
            try:
                existing = self._load_with_fallback(path)
            except (SaveError, OSError) as exc:
                logger.error("Failed to update inventory in %s: %s", path, exc)
                return False
            self._write(path, GameData(pet=existing.pet, inventory=inventory, total_play_time=existing.total_play_time))
            return True

    def delete(self, pet_name: str) -> bool:
        with self.lock:
            path = self.path_for(pet_name)
            if not path.exists():
                return False
            path.unlink()
            bak = path.with_suffix(path.suffix + ".bak")
            if bak.exists():
                bak.unlink()
            logger.info("Deleted save %s", path)
            return True

    # Internal utilities

    def _check_owner(self, path: Path, pet_name: str) -> None:
        """Refuse to overwrite a file that holds a different pet.

        Distinct names can sanitize to the same file stem ("Max?" and "Max!").
        An unreadable file has no owner and may be replaced.
        """
        try:
            existing = self._load_with_fallback(path)
        except (SaveError, OSError):
            return
        if existing.pet.name != pet_name:
            raise SaveNameConflict(
                f"Save file {path.name} already belongs to {existing.pet.name!r}; choose another name"
            )

    def _write(self, path: Path, data: GameData) -> None:
        self._atomic_write(path, encode_game(data))

    def _load_with_fallback(self, path: Path) -> GameData:
        try:
            return self._read(path)
        except FileNotFoundError as e:
            raise SaveError(f"Save file not found: {path}") from e
        except SaveError as primary_exc:
            bak = path.with_suffix(path.suffix + ".bak")
            if bak.exists():
                try:
                    data = self._read(bak)
                    logger.warning("Recovered %s from backup %s", path, bak)
                    return data
                except (OSError, SaveError) as bak_exc:
                    logger.debug("Backup %s unusable: %s", bak, bak_exc)
            raise CorruptSaveError(f"Unable to load save from {path}: {primary_exc}") from primary_exc

    def _read(self, path: Path) -> GameData:
        try:
            with path.open("r", encoding="utf-8") as f:
                text = f.read()
        except UnicodeDecodeError as e:
            raise SaveValidationError(f"Save file is not valid UTF-8: {e}") from e
        return decode_game(text, self.catalog, self.settings.economy)

    def _atomic_write(self, path: Path, text: str) -> None:
        """Write text to path atomically, keeping the previous file as .bak.

        Strategy:
        - Write to path.tmp, flush and fsync
        - Copy the existing path to path.bak
        - Replace path with path.tmp
        """
        tmp = path.with_suffix(path.suffix + ".tmp")
        bak = path.with_suffix(path.suffix + ".bak")
        path.parent.mkdir(parents=True, exist_ok=True)
        with tmp.open("w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            shutil.copy2(str(path), str(bak))
        os.replace(tmp, path)
