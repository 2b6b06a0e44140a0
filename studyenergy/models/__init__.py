# studyenergy/models/__init__.py
from .user import User
from .daily_record import BatteryState, DailyRecord
from .activity_log import ActivityLogEntry

__all__ = ["User", "BatteryState", "DailyRecord", "ActivityLogEntry"]
