"""
Events Module - Eventos e confirmações de presença
"""
from .router import router as events_router
from .models import EventType, RSVPStatus, EventFilter, EventCreate
from .service import EventService, count_confirmed

__all__ = [
    "events_router",
    "EventType",
    "RSVPStatus",
    "EventFilter",
    "EventCreate",
    "EventService",
    "count_confirmed",
]
