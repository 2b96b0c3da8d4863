import logging
import threading
import uuid
from typing import List, Optional

from turn_timer.exceptions import PersistenceError
from turn_timer.models import Player
from .formatting import format_elapsed
from .persistence import PersistenceAdapter

logger = logging.getLogger(__name__)

DEFAULT_PLAYER_COUNT = 4


def default_players() -> List[Player]:
    return [Player(str(uuid.uuid4()), f"Player {n}", 0) for n in range(1, DEFAULT_PLAYER_COUNT + 1)]


class Snapshot:
    """Read-only view of the collection handed to the presentation layer."""

    def __init__(self, players, active_player_id=None, persistence_warning=None):
        self.players = tuple(p.copy() for p in players)
        self.active_player_id = active_player_id
        self.persistence_warning = persistence_warning

    @property
    def total_elapsed_seconds(self) -> int:
        return sum(p.elapsed_seconds for p in self.players)

    def get(self, player_id) -> Optional[Player]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def to_dict(self):
        return {
            'players': [
                {
                    'id': p.id,
                    'display_name': p.name,
                    'elapsed_seconds': p.elapsed_seconds,
                    'formatted_elapsed': format_elapsed(p.elapsed_seconds),
                    'is_active': p.id == self.active_player_id,
                }
                for p in self.players
            ],
            'active_player_id': self.active_player_id,
            'total_elapsed_seconds': self.total_elapsed_seconds,
            'formatted_total': format_elapsed(self.total_elapsed_seconds),
            'persistence_warning': self.persistence_warning,
        }


class PlayerTimerStore:
    """Owns the ordered player collection and saves it after every mutation.

    Unknown ids are ignored by every command. The active player reference
    lives here so removal and reset can clear it inline; only the
    ActiveTimerController sets it.
    """

    def __init__(self, adapter: PersistenceAdapter):
        self.adapter = adapter
        self.lock = threading.RLock()
        self._players: List[Player] = []
        self._active_player_id: Optional[str] = None
        self._last_warning: Optional[str] = None

    @property
    def active_player_id(self) -> Optional[str]:
        return self._active_player_id

    def initialize(self) -> Snapshot:
        with self.lock:
            try:
                loaded = self.adapter.load()
            except PersistenceError as exc:
                logger.warning(f"[store-init] load failed, starting fresh: {exc}")
                loaded = None
            if loaded is None:
                self._players = default_players()
                logger.info(f"[store-init] no saved players, created {DEFAULT_PLAYER_COUNT} defaults")
            else:
                self._players = loaded
                logger.info(f"[store-init] restored {len(loaded)} players")
            self._active_player_id = None
            return self.snapshot()

    def snapshot(self) -> Snapshot:
        with self.lock:
            return Snapshot(self._players, self._active_player_id, self._last_warning)

    def add_player(self) -> Snapshot:
        with self.lock:
            player_id = str(uuid.uuid4())
            while self._find(player_id) is not None:
                logger.warning(f"Player id collision detected, regenerating: {player_id}")
                player_id = str(uuid.uuid4())
            player = Player(player_id, f"Player {len(self._players) + 1}", 0)
            self._players.append(player)
            logger.info(f"[player-add] player={player_id} name={player.name!r}")
            return self._persist()

    def remove_player(self, player_id) -> Snapshot:
        with self.lock:
            player = self._find(player_id)
            if player is None:
                logger.debug(f"[player-remove] unknown player={player_id}, ignoring")
                return self.snapshot()
            self._players.remove(player)
            if self._active_player_id == player_id:
                self._active_player_id = None
                logger.info(f"[timer-stop] player={player_id} removed while running")
            logger.info(f"[player-remove] player={player_id}")
            return self._persist()

    def rename_player(self, player_id, new_name: str) -> Snapshot:
        with self.lock:
            player = self._find(player_id)
            if player is None:
                logger.debug(f"[player-rename] unknown player={player_id}, ignoring")
                return self.snapshot()
            player.name = new_name
            return self._persist()

    def set_elapsed(self, player_id, seconds: int) -> Snapshot:
        if isinstance(seconds, bool) or not isinstance(seconds, int) or seconds < 0:
            raise ValueError(f"elapsed seconds must be a non-negative integer, got {seconds!r}")
        with self.lock:
            player = self._find(player_id)
            if player is None:
                logger.debug(f"[player-set-elapsed] unknown player={player_id}, ignoring")
                return self.snapshot()
            player.elapsed_seconds = seconds
            return self._persist()

    def reset_all(self) -> Snapshot:
        with self.lock:
            self._players = default_players()
            self._active_player_id = None
            logger.info("[reset] collection replaced with defaults")
            return self._persist()

    def set_active(self, player_id: Optional[str]) -> bool:
        """Point the active reference at an existing player or clear it.

        Returns False, leaving state untouched, when the id is unknown.
        """
        with self.lock:
            if player_id is not None and self._find(player_id) is None:
                return False
            self._active_player_id = player_id
            return True

    def _find(self, player_id) -> Optional[Player]:
        for p in self._players:
            if p.id == player_id:
                return p
        return None

    def _persist(self) -> Snapshot:
        try:
            self.adapter.save(self._players)
            self._last_warning = None
        except PersistenceError as exc:
            logger.warning(f"[store-save] keeping in-memory state: {exc}")
            self._last_warning = str(exc)
        return self.snapshot()
