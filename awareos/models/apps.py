"""App module data models."""

from dataclasses import dataclass, field

from ..errors import ValidationError


@dataclass
class AppManifest:
    """Self-description of an app module."""

    name: str
    domain: str = ""
    capabilities: list[str] = field(default_factory=list)
    actions: list[str] = field(default_factory=list)
    events: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "AppManifest":
        if not data.get("name"):
            raise ValidationError("App manifest must have a name")
        return cls(
            name=data["name"],
            domain=data.get("domain", ""),
            capabilities=list(data.get("capabilities") or []),
            actions=list(data.get("actions") or []),
            events=list(data.get("events") or []),
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "domain": self.domain,
            "capabilities": list(self.capabilities),
            "actions": list(self.actions),
            "events": list(self.events),
        }
