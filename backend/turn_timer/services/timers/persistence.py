import json
import logging
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from turn_timer import db
from turn_timer.exceptions import PersistenceError
from turn_timer.models import Player, StoredValue

logger = logging.getLogger(__name__)


def serialize_players(players: List[Player]) -> str:
    return json.dumps([p.to_record() for p in players])


def deserialize_players(raw: str) -> Optional[List[Player]]:
    """Decode a saved blob. Returns None when it is not a well-formed collection."""
    try:
        records = json.loads(raw)
    except (TypeError, ValueError, RecursionError):
        return None
    if not isinstance(records, list):
        return None
    players = []
    seen = set()
    for record in records:
        if not isinstance(record, dict):
            return None
        pid, name, time = record.get('id'), record.get('name'), record.get('time')
        if not isinstance(pid, str) or not isinstance(name, str):
            return None
        if isinstance(time, bool) or not isinstance(time, int) or time < 0:
            return None
        if pid in seen:
            return None
        seen.add(pid)
        players.append(Player.from_record(record))
    return players


class PersistenceAdapter:
    """Durable load/save of the whole player collection under one key.

    load() returns None when nothing is saved or the saved value cannot be
    decoded. Storage failures raise PersistenceError.
    """

    key = 'players'

    def load(self) -> Optional[List[Player]]:
        raise NotImplementedError

    def save(self, players: List[Player]) -> None:
        raise NotImplementedError


class SqlPersistenceAdapter(PersistenceAdapter):
    """Keeps the serialized collection in the stored_value table."""

    def __init__(self, app, key: str = 'players'):
        self.app = app
        self.key = key

    def load(self) -> Optional[List[Player]]:
        with self.app.app_context():
            try:
                row = db.session.get(StoredValue, self.key)
            except SQLAlchemyError as exc:
                db.session.rollback()
                raise PersistenceError('load', self.key, str(exc)) from exc
            if row is None:
                return None
            players = deserialize_players(row.value)
            if players is None:
                logger.warning(f"[store-load] key={self.key} holds an unreadable value, ignoring it")
            return players

    def save(self, players: List[Player]) -> None:
        with self.app.app_context():
            try:
                row = db.session.get(StoredValue, self.key)
                if row is None:
                    row = StoredValue(key=self.key)
                row.value = serialize_players(players)
                db.session.add(row)
                db.session.commit()
            except SQLAlchemyError as exc:
                db.session.rollback()
                raise PersistenceError('save', self.key, str(exc)) from exc


class MemoryPersistenceAdapter(PersistenceAdapter):
    """In-process store, used in tests and for throwaway sessions.

    Set fail_saves / fail_loads to simulate a storage outage.
    """

    def __init__(self, key: str = 'players', initial: Optional[Dict[str, str]] = None):
        self.key = key
        self.values: Dict[str, str] = dict(initial or {})
        self.fail_saves = False
        self.fail_loads = False
        self.save_count = 0

    def load(self) -> Optional[List[Player]]:
        if self.fail_loads:
            raise PersistenceError('load', self.key, 'storage unavailable')
        raw = self.values.get(self.key)
        if raw is None:
            return None
        return deserialize_players(raw)

    def save(self, players: List[Player]) -> None:
        if self.fail_saves:
            raise PersistenceError('save', self.key, 'quota exceeded')
        self.values[self.key] = serialize_players(players)
        self.save_count += 1
