"""Suggestion and action data models."""

from dataclasses import dataclass, field
from typing import Any, Literal

from ..errors import ValidationError

Priority = Literal["low", "medium", "high"]


@dataclass
class ActionRequest:
    """A single action to dispatch to an app module."""

    app: str
    action: str
    params: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "ActionRequest":
        if not data.get("app") or not data.get("action"):
            raise ValidationError("Action requires 'app' and 'action'")
        return cls(
            app=data["app"],
            action=data["action"],
            params=dict(data.get("params") or {}),
        )

    def to_dict(self) -> dict:
        return {"app": self.app, "action": self.action, "params": self.params}


@dataclass
class ActionOutcome:
    """Result of dispatching one ActionRequest."""

    action: ActionRequest
    success: bool
    result: Any = None
    error: str | None = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "action": self.action.to_dict(),
            "success": self.success,
        }
        if self.success:
            data["result"] = self.result
        else:
            data["error"] = self.error
        return data


@dataclass
class Suggestion:
    """Advisory bundle awaiting explicit approval or dismissal."""

    id: str
    message: str
    actions: list[ActionRequest]
    priority: Priority
    context: dict  # originating trigger

    def to_payload(self) -> dict:
        """Payload of the orchestrator_suggestion bus event."""
        return {
            "id": self.id,
            "message": self.message,
            "actions": [a.to_dict() for a in self.actions],
            "priority": self.priority,
            "context": self.context,
        }
