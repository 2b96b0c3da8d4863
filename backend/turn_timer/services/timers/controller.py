import logging
import time
from typing import Callable, Optional

from .store import PlayerTimerStore, Snapshot

logger = logging.getLogger(__name__)


class ActiveTimerController:
    """Runs at most one player's clock at a time.

    - Toggling the running player stops it; toggling anyone else starts
      them and stops whoever was running
    - Owns a single tick worker; each start/stop bumps the generation so a
      worker from an earlier start never applies another tick
    - With no start_background_task, no worker is scheduled and ticks are
      driven by calling tick() (used in TESTING)
    """

    def __init__(
        self,
        store: PlayerTimerStore,
        interval: float = 1,
        start_background_task: Optional[Callable] = None,
        sleep: Callable[[float], None] = time.sleep,
        on_tick: Optional[Callable[[Snapshot], None]] = None,
        heartbeat: int = 0,
    ):
        self.store = store
        self.interval = interval
        self.start_background_task = start_background_task
        self.sleep = sleep
        self.on_tick = on_tick
        self.heartbeat = heartbeat
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def toggle_start_stop(self, player_id) -> Snapshot:
        with self.store.lock:
            if self.store.active_player_id == player_id:
                self.store.set_active(None)
                self._generation += 1
                logger.info(f"[timer-stop] player={player_id}")
                return self.store.snapshot()
            if not self.store.set_active(player_id):
                logger.debug(f"[timer-toggle] unknown player={player_id}, ignoring")
                return self.store.snapshot()
            self._generation += 1
            generation = self._generation
            logger.info(f"[timer-start] player={player_id} generation={generation}")
        self._schedule(generation)
        return self.store.snapshot()

    def stop(self) -> Snapshot:
        with self.store.lock:
            previous = self.store.active_player_id
            self.store.set_active(None)
            self._generation += 1
            if previous is not None:
                logger.info(f"[timer-stop] player={previous}")
            return self.store.snapshot()

    def tick(self) -> Snapshot:
        """Add one second to the active player, if any."""
        with self.store.lock:
            player_id = self.store.active_player_id
            if player_id is None:
                return self.store.snapshot()
            current = self.store.snapshot().get(player_id)
            return self.store.set_elapsed(player_id, current.elapsed_seconds + 1)

    def _schedule(self, generation: int) -> None:
        if self.start_background_task is None:
            return
        self.start_background_task(self._worker, generation)

    def _worker(self, generation: int) -> None:
        ticks = 0
        while True:
            self.sleep(self.interval)
            with self.store.lock:
                if generation != self._generation or self.store.active_player_id is None:
                    logger.info(f"[timer-abort] generation={generation} current={self._generation} stale worker exiting")
                    return
                snapshot = self.tick()
            ticks += 1
            if self.heartbeat and ticks % self.heartbeat == 0:
                logger.info(f"[timer-heartbeat] player={snapshot.active_player_id} ticks={ticks}")
            if self.on_tick is not None:
                # A failed push must not kill the clock; the next tick re-sends full state
                try:
                    self.on_tick(snapshot)
                except Exception as exc:
                    logger.warning(f"[timer-broadcast] player={snapshot.active_player_id} push failed: {exc}")
