"""Built-in app modules."""

from .calendar import CALENDAR_MANIFEST, CalendarApp

__all__ = ["CALENDAR_MANIFEST", "CalendarApp"]
