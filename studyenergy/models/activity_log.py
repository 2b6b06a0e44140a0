# studyenergy/models/activity_log.py
from datetime import datetime
from .. import db


class ActivityLogEntry(db.Model):
    __tablename__ = "activity_log"

    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    user_id = db.Column(db.BigInteger, db.ForeignKey("users.id"), nullable=False, index=True)
    type = db.Column(db.String(100), nullable=False)
    points = db.Column(db.Integer, nullable=False)   # signed, never clamped
    date = db.Column(db.Date, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    user = db.relationship("User", backref="activity_log")

    def to_dict(self):
        return {
            "id": self.id,
            "type": self.type,
            "points": int(self.points),
            "date": self.date.isoformat() if self.date else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
