"""Suggestion approval API routes."""

from typing import Any, Literal

from fastapi import APIRouter
from pydantic import BaseModel, Field

from ...app import Application
from ...models import ActionRequest
from .errors import to_http_exception


class ActionModel(BaseModel):
    """A single action to execute."""

    app: str = Field(min_length=1)
    action: str = Field(min_length=1)
    params: dict[str, Any] = Field(default_factory=dict)


class SuggestionResponse(BaseModel):
    """Response model for a pending suggestion."""

    id: str
    message: str
    actions: list[ActionModel]
    priority: Literal["low", "medium", "high"]
    context: dict[str, Any]


class ApproveRequest(BaseModel):
    """Optional override of the actions to execute."""

    actions: list[ActionModel] | None = None


class DismissRequest(BaseModel):
    """Request model for dismissing a suggestion."""

    reason: str | None = None
    suppress_future: bool = False


def create_suggestions_router(app: Application) -> APIRouter:
    """Create suggestions router."""
    router = APIRouter(prefix="/api/suggestions", tags=["suggestions"])

    @router.get("", response_model=list[SuggestionResponse])
    async def list_suggestions() -> list[dict]:
        """Suggestions awaiting approval or dismissal."""
        return [s.to_payload() for s in app.orchestrator.pending_suggestions()]

    @router.post("/{suggestion_id}/approve")
    async def approve_suggestion(
        suggestion_id: str, request: ApproveRequest | None = None
    ) -> dict:
        """Execute a suggestion's actions."""
        actions = None
        if request and request.actions is not None:
            actions = [ActionRequest(**a.model_dump()) for a in request.actions]

        try:
            outcomes = await app.orchestrator.approve_suggestion(suggestion_id, actions)
        except Exception as e:
            raise to_http_exception(e)

        return {
            "suggestion_id": suggestion_id,
            "results": [o.to_dict() for o in outcomes],
        }

    @router.post("/{suggestion_id}/dismiss")
    async def dismiss_suggestion(
        suggestion_id: str, request: DismissRequest | None = None
    ) -> dict:
        """Dismiss a suggestion, optionally suppressing similar ones."""
        request = request or DismissRequest()
        try:
            await app.orchestrator.dismiss_suggestion(
                suggestion_id,
                reason=request.reason,
                suppress_future=request.suppress_future,
            )
        except Exception as e:
            raise to_http_exception(e)
        return {"status": "ok"}

    return router
