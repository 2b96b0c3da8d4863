from turn_timer import db


class StoredValue(db.Model):
    """One entry of the durable key-value store."""
    __tablename__ = 'stored_value'
    key = db.Column(db.String(64), primary_key=True)
    value = db.Column(db.Text, nullable=False)


class Player:
    """A timed participant. Lives only inside a PlayerTimerStore collection."""

    def __init__(self, id, name, elapsed_seconds=0):
        self.id = id
        self.name = name
        self.elapsed_seconds = elapsed_seconds

    def copy(self):
        return Player(self.id, self.name, self.elapsed_seconds)

    def to_record(self):
        # Persisted layout: {id, name, time}
        return {
            'id': self.id,
            'name': self.name,
            'time': self.elapsed_seconds,
        }

    @classmethod
    def from_record(cls, record):
        return cls(record['id'], record['name'], record['time'])

    def __eq__(self, other):
        if not isinstance(other, Player):
            return NotImplemented
        return (self.id, self.name, self.elapsed_seconds) == (other.id, other.name, other.elapsed_seconds)

    def __repr__(self):
        return f"Player(id={self.id!r}, name={self.name!r}, elapsed_seconds={self.elapsed_seconds})"
