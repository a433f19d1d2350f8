"""SIM implementation - hardcoded event scenario for manual testing."""

import asyncio
import random
from datetime import datetime, timedelta
from typing import Protocol

import httpx

from awareos.logging_config import get_logger

logger = get_logger(__name__)


class ISim(Protocol):
    """Generate bus traffic through the HTTP API."""

    async def start(self) -> None:
        """Start hardcoded scenario."""
        ...

    async def stop(self) -> None:
        """Stop scenario."""
        ...


def build_scenario(now: datetime) -> list[tuple[str, str, dict]]:
    """Scenario steps as (kind, target, body); kind is "dispatch" or "event"."""
    meeting = now.replace(minute=0, second=0, microsecond=0) + timedelta(hours=2)
    return [
        (
            "dispatch",
            "calendar",
            {
                "action": "create_event",
                "params": {"title": "Team sync", "start": meeting.isoformat()},
            },
        ),
        (
            "dispatch",
            "calendar",
            {
                "action": "create_event",
                "params": {
                    "title": "Dentist",
                    "start": (meeting + timedelta(minutes=30)).isoformat(),
                },
            },
        ),
        (
            "event",
            "weather_precipitation_expected",
            {"probability": 0.8, "startsAt": meeting.isoformat(), "source": "sim"},
        ),
        ("event", "app_opened", {"app": "notes", "source": "sim"}),
        (
            "event",
            "todo_task_updated",
            {"task": "File taxes", "needsAttention": True, "source": "sim"},
        ),
    ]


class Sim:
    """SIM with hardcoded scenario for testing."""

    def __init__(self, api_url: str = "http://localhost:8000"):
        self._api_url = api_url
        self._running = False
        self._task: asyncio.Task | None = None
        self._client: httpx.AsyncClient | None = None

    async def start(self) -> None:
        """Start hardcoded scenario."""
        if self._running:
            return

        self._running = True
        self._client = httpx.AsyncClient(base_url=self._api_url, timeout=10.0)

        # Start background task
        self._task = asyncio.create_task(self._run_scenario())

    async def stop(self) -> None:
        """Stop scenario."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        if self._client:
            await self._client.aclose()
            self._client = None

    async def _run_scenario(self) -> None:
        """Run hardcoded scenario."""
        steps = build_scenario(datetime.now().astimezone())
        logger.info("SIM: scenario started with %s steps", len(steps))

        try:
            for kind, target, body in steps:
                if not self._running:
                    break

                if kind == "dispatch":
                    await self._post(f"/api/apps/{target}/dispatch", body)
                else:
                    await self._post("/api/events", {"topic": target, "payload": body})

                # Random delay between steps (1-3 seconds)
                await asyncio.sleep(random.uniform(1, 3))

        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error("SIM scenario error: %s", e)
        finally:
            self._running = False
            logger.info("SIM: scenario completed")

    async def _post(self, path: str, body: dict) -> None:
        """POST to the API; failures are logged, not raised."""
        if not self._client:
            return

        try:
            response = await self._client.post(path, json=body)
            if response.is_success:
                logger.info("SIM: %s -> %s", path, response.status_code)
            else:
                logger.error("SIM: %s failed: %s %s", path, response.status_code, response.text)
        except Exception as e:
            logger.error("SIM: Failed to post %s: %s", path, e)
