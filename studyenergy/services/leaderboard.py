# studyenergy/services/leaderboard.py
from datetime import date
from typing import Any, Dict, List

from sqlalchemy import case, func

from .. import db
from ..models.activity_log import ActivityLogEntry
from ..models.daily_record import DailyRecord
from ..models.user import User


def get_leaderboard(today: date) -> List[Dict[str, Any]]:
    """
    Every user with lifetime energy, today's energy and battery balance,
    highest lifetime energy first. Read-only aggregation over the ledger.
    """
    points_sq = (
        db.session.query(
            ActivityLogEntry.user_id.label("user_id"),
            func.sum(ActivityLogEntry.points).label("total_energy"),
        )
        .group_by(ActivityLogEntry.user_id)
        .subquery()
    )

    battery_sq = (
        db.session.query(
            DailyRecord.user_id.label("user_id"),
            func.sum(case((DailyRecord.battery_earned.is_(True), 1), else_=0)).label("earned"),
            func.sum(case((DailyRecord.bonus_applied.is_(True), 1), else_=0)).label("used"),
        )
        .group_by(DailyRecord.user_id)
        .subquery()
    )

    today_sq = (
        db.session.query(
            DailyRecord.user_id.label("user_id"),
            DailyRecord.energy.label("energy"),
        )
        .filter(DailyRecord.date == today)
        .subquery()
    )

    total_energy = func.coalesce(points_sq.c.total_energy, 0)

    rows = (
        db.session.query(
            User.id,
            User.username,
            total_energy.label("total_energy"),
            func.coalesce(today_sq.c.energy, 0).label("today_energy"),
            (func.coalesce(battery_sq.c.earned, 0) - func.coalesce(battery_sq.c.used, 0)).label("batteries"),
        )
        .outerjoin(points_sq, points_sq.c.user_id == User.id)
        .outerjoin(today_sq, today_sq.c.user_id == User.id)
        .outerjoin(battery_sq, battery_sq.c.user_id == User.id)
        .order_by(total_energy.desc(), User.id.asc())
        .all()
    )

    return [
        {
            "id": row.id,
            "username": row.username,
            "total_energy": int(row.total_energy or 0),
            "today_energy": int(row.today_energy or 0),
            "batteries": int(row.batteries or 0),
        }
        for row in rows
    ]
