# studyenergy/services/accrual.py
"""
Daily accrual engine.

Every request that touches a user's energy goes through `ensure_today`
first, which lazily creates the (user, today) record and decides whether a
banked battery pays for a head-start bonus. `record_activity` then adds a
signed point delta to the day, floor-clamped at zero, and mints at most one
battery per day when the goal is crossed. `compute_status` is the read side.

"Today" is the UTC calendar date, recomputed on every call.
"""

from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, List, Optional, Tuple

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import EngineError, StorageError, ValidationError
from ..models.activity_log import ActivityLogEntry
from ..models.daily_record import BatteryState, DailyRecord
from .ledger_store import LedgerStore

# signed 32-bit, the range of the INTEGER points column
POINTS_MIN = -(2 ** 31)
POINTS_MAX = 2 ** 31 - 1


@dataclass(frozen=True)
class AccrualResult:
    entry_id: int
    lifetime_energy: int
    today_energy: int
    battery_balance: int
    battery_earned_today: bool
    new_battery: bool

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class EnergyStatus:
    lifetime_energy: int
    today_energy: int
    battery_balance: int
    battery_earned_today: bool
    bonus_active_today: bool

    def to_dict(self):
        return asdict(self)


# ------------------------------
# Helpers
# ------------------------------
def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def validate_activity(activity_type: Any, points: Any) -> Tuple[str, int]:
    """Reject bad input before anything touches storage."""
    if not isinstance(activity_type, str) or not activity_type.strip():
        raise ValidationError("type is required")
    activity_type = activity_type.strip()

    max_len = current_app.config["MAX_ACTIVITY_TYPE_LENGTH"]
    if len(activity_type) > max_len:
        raise ValidationError(f"type must be at most {max_len} characters")

    if points is None:
        raise ValidationError("points is required")
    # bool is an int subclass; a JSON true is not a point value
    if isinstance(points, bool) or not isinstance(points, int):
        raise ValidationError("points must be an integer")
    if not POINTS_MIN <= points <= POINTS_MAX:
        raise ValidationError(f"points must be between {POINTS_MIN} and {POINTS_MAX}")

    return activity_type, points


def _fail(store: LedgerStore, user_id: int, day: date, err: Exception) -> StorageError:
    store.session.rollback()
    current_app.logger.exception(f"[accrual] storage failure user_id={user_id} date={day}: {err}")
    return StorageError(f"storage failure for user {user_id} on {day.isoformat()}")


# ------------------------------
# Daily initializer
# ------------------------------
def _bonus_eligible(store: LedgerStore, user_id: int, today: date) -> bool:
    yesterday = store.get_record(user_id, today - timedelta(days=1))
    if yesterday is None or yesterday.battery_state is not BatteryState.EARNED:
        return False
    return store.battery_balance(user_id) > 0


def _create_today(store: LedgerStore, user_id: int, today: date) -> DailyRecord:
    eligible = _bonus_eligible(store, user_id, today)
    bonus_points = current_app.config["BATTERY_BONUS_POINTS"]

    record = DailyRecord(
        user_id=user_id,
        date=today,
        energy=bonus_points if eligible else 0,
        battery_earned=False,
        bonus_applied=eligible,
    )
    store.put_record(record)

    if eligible:
        store.append_log_entry(
            ActivityLogEntry(
                user_id=user_id,
                type=current_app.config["BONUS_ACTIVITY_TYPE"],
                points=bonus_points,
                date=today,
            )
        )
        current_app.logger.info(
            f"[accrual] battery bonus applied user_id={user_id} date={today} points={bonus_points}"
        )
    else:
        current_app.logger.info(f"[accrual] new day user_id={user_id} date={today}")

    return record


def ensure_today(user_id: int, today: Optional[date] = None, store: Optional[LedgerStore] = None) -> DailyRecord:
    """
    Return the (user, today) record, creating it on first touch.

    Repeat calls are pure reads. Creation and the optional bonus log entry
    commit together; losing a creation race to a concurrent request raises
    StorageError and leaves nothing behind.
    """
    today = today or utc_today()
    store = store or LedgerStore()

    try:
        record = store.get_record(user_id, today)
        if record is not None:
            return record

        record = _create_today(store, user_id, today)
        store.session.commit()
    except StorageError:
        store.session.rollback()
        current_app.logger.warning(f"[accrual] lost day-creation race user_id={user_id} date={today}")
        raise
    except SQLAlchemyError as e:
        raise _fail(store, user_id, today, e) from e

    return record


# ------------------------------
# Accrual processor
# ------------------------------
def record_activity(
    user_id: int,
    activity_type: Any,
    points: Any,
    today: Optional[date] = None,
    store: Optional[LedgerStore] = None,
) -> AccrualResult:
    activity_type, points = validate_activity(activity_type, points)
    today = today or utc_today()
    store = store or LedgerStore()
    goal = current_app.config["BATTERY_GOAL"]

    ensure_today(user_id, today=today, store=store)

    try:
        entry = store.append_log_entry(
            ActivityLogEntry(user_id=user_id, type=activity_type, points=points, date=today)
        )

        # clamp and threshold run inside the database; the first write above
        # holds the row (or, on SQLite, the database) until commit
        if store.add_energy(user_id, today, points) == 0:
            store.require_record(user_id, today)
        new_battery = store.mark_battery_earned(user_id, today, goal)

        record = store.require_record(user_id, today, refresh=True)
        entry_id = int(entry.id)
        today_energy = int(record.energy)
        battery_earned = bool(record.battery_earned)
        store.session.commit()
    except EngineError:
        store.session.rollback()
        raise
    except SQLAlchemyError as e:
        raise _fail(store, user_id, today, e) from e

    if new_battery:
        current_app.logger.info(
            f"[accrual] battery earned user_id={user_id} date={today} energy={today_energy}"
        )

    return AccrualResult(
        entry_id=entry_id,
        lifetime_energy=store.sum_points(user_id),
        today_energy=today_energy,
        battery_balance=store.battery_balance(user_id),
        battery_earned_today=battery_earned,
        new_battery=new_battery,
    )


# ------------------------------
# Balance aggregator
# ------------------------------
def compute_status(user_id: int, today: Optional[date] = None, store: Optional[LedgerStore] = None) -> EnergyStatus:
    today = today or utc_today()
    store = store or LedgerStore()

    record = ensure_today(user_id, today=today, store=store)

    try:
        return EnergyStatus(
            lifetime_energy=store.sum_points(user_id),
            today_energy=int(record.energy),
            battery_balance=store.battery_balance(user_id),
            battery_earned_today=bool(record.battery_earned),
            bonus_active_today=bool(record.bonus_applied),
        )
    except SQLAlchemyError as e:
        raise _fail(store, user_id, today, e) from e


def list_today_activity(
    user_id: int, today: Optional[date] = None, store: Optional[LedgerStore] = None
) -> List[ActivityLogEntry]:
    """Today's log entries, most recent first."""
    today = today or utc_today()
    store = store or LedgerStore()
    try:
        return store.list_today(user_id, today)
    except SQLAlchemyError as e:
        raise _fail(store, user_id, today, e) from e
