# studyenergy/services/ledger_store.py
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError

from .. import db
from ..errors import NotInitializedError, StorageError
from ..models.activity_log import ActivityLogEntry
from ..models.daily_record import DailyRecord


class LedgerStore:
    """
    Durable storage for daily records and the activity log, bound to one
    SQLAlchemy session. Nothing here commits; the engine owns transaction
    boundaries so a log append and a record update land together.
    """

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    # ------------------------------
    # Daily records
    # ------------------------------
    def _record_query(self, user_id: int, day: date):
        return self.session.query(DailyRecord).filter(
            DailyRecord.user_id == user_id,
            DailyRecord.date == day,
        )

    def get_record(self, user_id: int, day: date, refresh: bool = False) -> Optional[DailyRecord]:
        q = self._record_query(user_id, day)
        if refresh:
            # re-read the row even if it is already in the identity map
            q = q.populate_existing()
        return q.first()

    def require_record(self, user_id: int, day: date, refresh: bool = False) -> DailyRecord:
        record = self.get_record(user_id, day, refresh=refresh)
        if record is None:
            raise NotInitializedError(f"no daily record for user {user_id} on {day.isoformat()}")
        return record

    def put_record(self, record: DailyRecord) -> DailyRecord:
        """
        Insert or update. A first insert for a (user, date) that already
        exists fails on the unique constraint and surfaces as StorageError.
        """
        self.session.add(record)
        try:
            self.session.flush()
        except IntegrityError as e:
            raise StorageError(
                f"daily record for user {record.user_id} on {record.date} already exists"
            ) from e
        return record

    def add_energy(self, user_id: int, day: date, points: int) -> int:
        """
        Add a signed delta to the day's energy, floored at zero, in a single
        UPDATE so concurrent writers serialize on the row instead of
        overwriting each other. Returns the number of rows touched.
        """
        new_energy = DailyRecord.energy + points
        return self._record_query(user_id, day).update(
            {DailyRecord.energy: case((new_energy < 0, 0), else_=new_energy)},
            synchronize_session=False,
        )

    def mark_battery_earned(self, user_id: int, day: date, goal: int) -> bool:
        """
        Flip NOT_EARNED -> EARNED when the day has reached `goal`. Only the
        statement that actually changed the row gets True back.
        """
        updated = (
            self._record_query(user_id, day)
            .filter(DailyRecord.battery_earned.is_(False), DailyRecord.energy >= goal)
            .update({DailyRecord.battery_earned: True}, synchronize_session=False)
        )
        return updated == 1

    # ------------------------------
    # Activity log
    # ------------------------------
    def append_log_entry(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        self.session.add(entry)
        self.session.flush()
        return entry

    def list_today(self, user_id: int, day: date) -> List[ActivityLogEntry]:
        return (
            self.session.query(ActivityLogEntry)
            .filter(ActivityLogEntry.user_id == user_id, ActivityLogEntry.date == day)
            .order_by(ActivityLogEntry.id.desc())
            .all()
        )

    # ------------------------------
    # Aggregates
    # ------------------------------
    def sum_points(self, user_id: int) -> int:
        total = (
            self.session.query(func.coalesce(func.sum(ActivityLogEntry.points), 0))
            .filter(ActivityLogEntry.user_id == user_id)
            .scalar()
        )
        return int(total or 0)

    def sum_battery_ledger(self, user_id: int) -> Dict[str, int]:
        earned, used = (
            self.session.query(
                func.coalesce(func.sum(case((DailyRecord.battery_earned.is_(True), 1), else_=0)), 0),
                func.coalesce(func.sum(case((DailyRecord.bonus_applied.is_(True), 1), else_=0)), 0),
            )
            .filter(DailyRecord.user_id == user_id)
            .one()
        )
        return {"earned": int(earned or 0), "used": int(used or 0)}

    def battery_balance(self, user_id: int) -> int:
        ledger = self.sum_battery_ledger(user_id)
        return ledger["earned"] - ledger["used"]
