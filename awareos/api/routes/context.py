"""Context store API routes (user data ownership)."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from ...app import Application
from .errors import to_http_exception


class ValueRequest(BaseModel):
    """Request model for profile/preference values."""

    value: Any


class PatternRequest(BaseModel):
    """Request model for adding a pattern."""

    data: dict[str, Any]
    confidence: float | None = Field(None, ge=0.0, le=1.0)


class RatingRequest(BaseModel):
    """Request model for rating a log entry."""

    rating: float | None
    feedback: str | None = None


class LogEntryResponse(BaseModel):
    """Response model for a log entry."""

    id: int
    timestamp: datetime
    kind: str
    payload: dict[str, Any]
    rating: float | None
    feedback: str | None


def create_context_router(app: Application) -> APIRouter:
    """Create context router."""
    router = APIRouter(prefix="/api/context", tags=["context"])

    @router.get("")
    async def get_context() -> dict:
        """Profile, patterns and preferences as seen by the orchestrator."""
        return app.context_store.get_full_context()

    @router.put("/profile/{key}")
    async def set_profile(key: str, request: ValueRequest) -> dict:
        try:
            entry = await app.context_store.set_profile(key, request.value)
        except Exception as e:
            raise to_http_exception(e)
        return entry.to_dict()

    @router.delete("/profile/{key}")
    async def delete_profile(key: str) -> dict:
        try:
            await app.context_store.delete_profile(key)
        except Exception as e:
            raise to_http_exception(e)
        return {"status": "ok"}

    @router.put("/preferences/{key}")
    async def set_preference(key: str, request: ValueRequest) -> dict:
        try:
            entry = await app.context_store.set_preference(key, request.value)
        except Exception as e:
            raise to_http_exception(e)
        return entry.to_dict()

    @router.post("/patterns", status_code=201)
    async def add_pattern(request: PatternRequest) -> dict:
        try:
            pattern = await app.context_store.add_pattern(request.data, request.confidence)
        except Exception as e:
            raise to_http_exception(e)
        return pattern.to_dict()

    @router.get("/log", response_model=list[LogEntryResponse])
    async def get_log(limit: int = Query(50, ge=1, le=1000)) -> list[dict]:
        """Audit log, newest first."""
        try:
            entries = await app.context_store.get_log(limit)
        except Exception as e:
            raise to_http_exception(e)
        return [entry.to_dict() for entry in entries]

    @router.post("/log/{log_id}/rating")
    async def rate_log_entry(log_id: int, request: RatingRequest) -> dict:
        """Rate a recent log entry. Entries outside the lookback window are ignored."""
        try:
            updated = await app.context_store.rate_action(
                log_id, request.rating, request.feedback
            )
        except Exception as e:
            raise to_http_exception(e)
        return {"updated": updated}

    @router.get("/export")
    async def export_context() -> dict:
        try:
            return await app.context_store.export_all()
        except Exception as e:
            raise to_http_exception(e)

    @router.delete("")
    async def clear_context() -> dict:
        """Wipe all context data."""
        try:
            await app.context_store.clear_all()
        except Exception as e:
            raise to_http_exception(e)
        return {"status": "ok"}

    return router
