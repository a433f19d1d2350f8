"""Calendar app module: reference implementation of the app module interface."""

import asyncio
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable

from ..errors import NotFoundError, UnsupportedOperationError, ValidationError
from ..event_bus import IEventBus
from ..logging_config import get_logger
from ..models import AppManifest

logger = get_logger(__name__)

UPCOMING_WINDOW = timedelta(minutes=15)
DEFAULT_DURATION = timedelta(hours=1)

CALENDAR_MANIFEST = AppManifest(
    name="calendar",
    domain="time-based commitments and availability",
    capabilities=[
        "read_events",
        "check_availability",
        "detect_conflicts",
    ],
    actions=[
        "create_event",
        "update_event",
        "delete_event",
        "get_events",
        "check_conflicts",
    ],
    events=[
        "calendar_event_created",
        "calendar_event_updated",
        "calendar_event_deleted",
        "calendar_event_moved",
        "calendar_conflict_detected",
        "calendar_upcoming_soon",
    ],
)


def _parse_time(value: Any) -> datetime:
    """ISO string or datetime to an aware datetime (naive means local time)."""
    if isinstance(value, datetime):
        return value.astimezone()
    try:
        return datetime.fromisoformat(str(value)).astimezone()
    except ValueError as e:
        raise ValidationError(f"Invalid time: {value!r}") from e


class CalendarApp:
    """In-memory calendar that publishes its changes on the event bus."""

    def __init__(
        self,
        event_bus: IEventBus,
        clock: Callable[[], datetime] | None = None,
    ):
        self.manifest = CALENDAR_MANIFEST
        self._event_bus = event_bus
        self._clock = clock or (lambda: datetime.now().astimezone())
        self._events: list[dict] = []
        self._notified: set[str] = set()
        self._checker: asyncio.Task | None = None

        self._actions: dict[str, Callable[[dict], Any]] = {
            "create_event": self.create_event,
            "update_event": self.update_event,
            "delete_event": self.delete_event,
            "get_events": self.get_events,
            "check_conflicts": self.check_conflicts,
        }

    # App module interface
    async def init(self, check_interval: float = 60.0) -> None:
        """Start the periodic upcoming-event check."""
        if self._checker is None:
            self._checker = asyncio.create_task(self._upcoming_loop(check_interval))
        logger.info("Calendar ready", extra={"app": self.manifest.name})

    async def stop(self) -> None:
        if self._checker:
            self._checker.cancel()
            try:
                await self._checker
            except asyncio.CancelledError:
                pass
            self._checker = None

    def get_state(self) -> dict:
        now = self._clock()
        day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        return {
            "events_today": self._in_range(day_start, day_start + timedelta(days=1)),
            "upcoming_events": self._in_range(now, now + timedelta(days=7)),
            "total_events": len(self._events),
        }

    def dispatch(self, action: str, params: dict) -> Any:
        handler = self._actions.get(action)
        if handler is None:
            raise UnsupportedOperationError(f"Unknown action: {action}")
        return handler(params or {})

    # Actions
    def create_event(self, params: dict) -> dict:
        title = params.get("title")
        start = params.get("start")
        if not title or not start:
            raise ValidationError("Event requires at least title and start time")

        start_dt = _parse_time(start)
        end_dt = _parse_time(params["end"]) if params.get("end") else start_dt + DEFAULT_DURATION
        conflicts = self._conflicts(start_dt, end_dt)

        event = {
            "id": str(uuid.uuid4()),
            "title": title,
            "start": start_dt.isoformat(),
            "end": end_dt.isoformat(),
            "location": params.get("location"),
            "description": params.get("description"),
            "attendees": list(params.get("attendees") or []),
            "status": params.get("status", "confirmed"),
            "created_at": self._clock().isoformat(),
        }
        self._events.append(event)

        self._event_bus.emit(
            "calendar_event_created",
            {
                "event": event,
                "hasConflicts": bool(conflicts),
                "conflicts": conflicts,
                "source": "calendar",
            },
        )
        if conflicts:
            self._event_bus.emit(
                "calendar_conflict_detected",
                {"newEvent": event, "conflictsWith": conflicts, "source": "calendar"},
            )
        return event

    def update_event(self, params: dict) -> dict:
        event_id = params.get("id")
        if not event_id:
            raise ValidationError("Event ID required for update")

        event = self._get(event_id)
        old_event = dict(event)
        updates = {k: v for k, v in params.items() if k != "id"}
        for key in ("start", "end"):
            if key in updates:
                updates[key] = _parse_time(updates[key]).isoformat()
        event.update(updates)
        event["updated_at"] = self._clock().isoformat()

        time_moved = old_event["start"] != event["start"] or old_event["end"] != event["end"]
        self._event_bus.emit(
            "calendar_event_updated",
            {"oldEvent": old_event, "newEvent": event, "timeMoved": time_moved, "source": "calendar"},
        )
        if time_moved:
            self._notified.discard(event_id)
            self._event_bus.emit(
                "calendar_event_moved",
                {
                    "event": event,
                    "previousStart": old_event["start"],
                    "previousEnd": old_event["end"],
                    "source": "calendar",
                },
            )
        return event

    def delete_event(self, params: dict) -> dict:
        event_id = params.get("id")
        if not event_id:
            raise ValidationError("Event ID required for deletion")

        event = self._get(event_id)
        self._events.remove(event)
        self._notified.discard(event_id)
        self._event_bus.emit("calendar_event_deleted", {"event": event, "source": "calendar"})
        return event

    def get_events(self, params: dict) -> list[dict]:
        if params.get("start_date") and params.get("end_date"):
            return self._in_range(_parse_time(params["start_date"]), _parse_time(params["end_date"]))
        if params.get("upcoming"):
            now = self._clock()
            return self._in_range(now, now + timedelta(days=int(params["upcoming"])))
        return self.get_state()["events_today"]

    def check_conflicts(self, params: dict) -> list[dict]:
        if not params.get("start") or not params.get("end"):
            raise ValidationError("Start and end time required")
        return self._conflicts(
            _parse_time(params["start"]),
            _parse_time(params["end"]),
            exclude_id=params.get("exclude_id"),
        )

    # Upcoming check
    def check_upcoming(self) -> list[dict]:
        """Emit calendar_upcoming_soon once per event starting within 15 minutes."""
        now = self._clock()
        announced = []
        for event in self._in_range(now, now + UPCOMING_WINDOW):
            if event["id"] in self._notified:
                continue
            minutes = round((_parse_time(event["start"]) - now).total_seconds() / 60)
            self._event_bus.emit(
                "calendar_upcoming_soon",
                {"event": event, "minutesUntil": minutes, "source": "calendar"},
            )
            self._notified.add(event["id"])
            announced.append(event)
        return announced

    async def _upcoming_loop(self, interval: float) -> None:
        while True:
            try:
                self.check_upcoming()
                await asyncio.sleep(interval)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Upcoming check error: %s", e, exc_info=True)
                await asyncio.sleep(interval)

    # Helpers
    def _get(self, event_id: str) -> dict:
        for event in self._events:
            if event["id"] == event_id:
                return event
        raise NotFoundError(f"Event not found: {event_id}")

    def _in_range(self, start: datetime, end: datetime) -> list[dict]:
        return [
            event
            for event in self._events
            if start <= _parse_time(event["start"]) <= end
        ]

    def _conflicts(
        self, start: datetime, end: datetime, exclude_id: str | None = None
    ) -> list[dict]:
        return [
            event
            for event in self._events
            if event["id"] != exclude_id
            and start < _parse_time(event["end"])
            and end > _parse_time(event["start"])
        ]
