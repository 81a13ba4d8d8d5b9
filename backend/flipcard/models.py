from datetime import datetime, timezone

from flipcard import db


def _utcnow():
    return datetime.now(timezone.utc)


class TimeRecord(db.Model):
    """One finished game, stored as total seconds. Rows are never updated."""
    __tablename__ = 'time_record'
    id = db.Column(db.Integer, primary_key=True)
    seconds = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'seconds': self.seconds,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class ContactRecord(db.Model):
    __tablename__ = 'contact_record'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False, default='')
    # Unique so that two racing submissions cannot both be stored
    email = db.Column(db.String(254), unique=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
