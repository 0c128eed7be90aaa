from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from .pet import Pet

logger = logging.getLogger(__name__)


class DeclineScheduler:
    """Background driver that calls ``pet.apply_decline()`` at a fixed interval.

    Every tick runs while holding ``lock``, the same lock the game session
    takes for player actions, so a decay step and an action never interleave.
    The callback only touches in-memory state; saving is done elsewhere.

    The interval only needs to be short and steady. How fast the pet actually
    declines is governed by the pet's own every-Nth-call gate.
    """

    def __init__(
        self,
        pet: Pet,
        interval: float = 0.25,
        lock: Optional[threading.RLock] = None,
        on_tick: Optional[Callable[[bool], None]] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self.pet = pet
        self.interval = float(interval)
        self.lock = lock or threading.RLock()
        self.on_tick = on_tick
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._state_lock = threading.Lock()

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        """Start ticking. Safe to call multiple times; later calls are no-ops."""
        with self._state_lock:
            if self.running:
                logger.debug("DeclineScheduler.start() called while already running")
                return
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run,
                args=(self._stop_event,),
                name=f"decline-{self.pet.name}",
                daemon=True,
            )
            self._thread.start()
        logger.info("Decline scheduler started for %s (interval=%.3fs)", self.pet.name, self.interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop ticking and wait for an in-flight step to finish.

        Safe to call when the scheduler was never started.
        """
        with self._state_lock:
            thread = self._thread
            if thread is None:
                return
            self._stop_event.set()
            if thread is not threading.current_thread():
                thread.join(timeout)
            self._thread = None
        logger.info("Decline scheduler stopped for %s", self.pet.name)

    def tick(self) -> bool:
        """Run one tick synchronously. Returns True if a decay step happened."""
        with self.lock:
            stepped = self.pet.apply_decline()
            if self.on_tick is not None:
                self.on_tick(stepped)
        return stepped

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval):
            try:
                self.tick()
            except Exception:
                logger.exception("Decline tick failed for %s; stopping scheduler", self.pet.name)
                return
