"""Event publishing and app module API routes."""

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ...app import Application
from .errors import to_http_exception


class EventRequest(BaseModel):
    """Request model for publishing an event."""

    topic: str = Field(min_length=1)
    payload: dict[str, Any] = Field(default_factory=dict)


class DispatchRequest(BaseModel):
    """Request model for dispatching an action to an app."""

    action: str = Field(min_length=1)
    params: dict[str, Any] = Field(default_factory=dict)


class ManifestResponse(BaseModel):
    """Response model for an app manifest."""

    name: str
    domain: str
    capabilities: list[str]
    actions: list[str]
    events: list[str]


def create_events_router(app: Application) -> APIRouter:
    """Create events/apps router."""
    router = APIRouter(prefix="/api", tags=["events"])

    @router.post("/events", status_code=202)
    async def publish_event(request: EventRequest) -> dict:
        """Publish an event on the bus."""
        if request.topic == "*":
            raise HTTPException(status_code=400, detail="Cannot publish to wildcard topic")
        app.event_bus.emit(request.topic, request.payload)
        return {"status": "accepted"}

    @router.get("/apps", response_model=list[ManifestResponse])
    async def list_apps() -> list[dict]:
        """Manifests of all registered apps, in registration order."""
        return [m.to_dict() for m in app.registry.get_all_manifests()]

    @router.get("/apps/state")
    async def get_app_state() -> dict:
        """Current state snapshot of every app."""
        try:
            return app.registry.get_all_state()
        except Exception as e:
            raise to_http_exception(e)

    @router.post("/apps/{name}/dispatch")
    async def dispatch_action(name: str, request: DispatchRequest) -> dict:
        """Dispatch an action directly to an app."""
        try:
            result = await app.registry.dispatch(name, request.action, request.params)
            return {"result": result}
        except Exception as e:
            raise to_http_exception(e)

    return router
