# studyenergy/models/daily_record.py
import enum

from sqlalchemy.orm import validates

from .. import db


class BatteryState(str, enum.Enum):
    NOT_EARNED = "not_earned"
    EARNED = "earned"


class DailyRecord(db.Model):
    """
    One row per (user, calendar day).

    `energy` is the day's floor-clamped running total. `battery_earned`
    only ever moves NOT_EARNED -> EARNED, and `bonus_applied` is decided
    when the row is created and never changes afterwards.
    """

    __tablename__ = "daily_records"

    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    user_id = db.Column(db.BigInteger, db.ForeignKey("users.id"), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    energy = db.Column(db.Integer, default=0, nullable=False)
    battery_earned = db.Column(db.Boolean, default=False, nullable=False)
    bonus_applied = db.Column(db.Boolean, default=False, nullable=False)

    user = db.relationship("User", backref="daily_records")

    # at most one record per user per day; concurrent first touches collide here
    __table_args__ = (
        db.UniqueConstraint("user_id", "date", name="uq_daily_records_user_date"),
    )

    @validates("energy")
    def _validate_energy(self, key, value):
        value = int(value)
        if value < 0:
            raise ValueError("energy cannot be negative")
        return value

    @validates("battery_earned")
    def _validate_battery_earned(self, key, value):
        value = bool(value)
        if self.battery_earned and not value:
            raise ValueError("battery_earned cannot be reset once earned")
        return value

    @validates("bonus_applied")
    def _validate_bonus_applied(self, key, value):
        value = bool(value)
        if self.id is not None and value != bool(self.bonus_applied):
            raise ValueError("bonus_applied is fixed when the record is created")
        return value

    @property
    def battery_state(self) -> BatteryState:
        return BatteryState.EARNED if self.battery_earned else BatteryState.NOT_EARNED

    def mark_battery_earned(self) -> bool:
        """Move to EARNED. Returns True only for the call that made the transition."""
        if self.battery_state is BatteryState.EARNED:
            return False
        self.battery_earned = True
        return True

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "date": self.date.isoformat() if self.date else None,
            "energy": int(self.energy or 0),
            "battery_state": self.battery_state.value,
            "battery_earned": bool(self.battery_earned),
            "bonus_applied": bool(self.bonus_applied),
        }

    def __repr__(self):
        return (
            f"<DailyRecord(user_id={self.user_id}, date={self.date}, "
            f"energy={self.energy}, battery={self.battery_state.value})>"
        )
