"""
Attendance Module - Presença real nos eventos (admin)
"""
from .models import PresenceStatus, FINE_TRIGGERING_STATUSES
from .service import AttendanceService, sort_rows, summarize

__all__ = [
    "PresenceStatus",
    "FINE_TRIGGERING_STATUSES",
    "AttendanceService",
    "sort_rows",
    "summarize",
]
