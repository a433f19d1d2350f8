"""Parsing of the free-text reasoning response.

The reasoning service is asked for a JSON object, but its output is treated
as untrusted text: the first balanced ``{...}`` region is extracted and
validated. Parsing never raises; it returns a ParseResult.
"""

import json
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError

from ..errors import ReasoningParseError


class ActionModel(BaseModel):
    """One proposed action."""

    app: str = Field(min_length=1)
    action: str = Field(min_length=1)
    params: dict[str, Any] | None = None


class SuggestionModel(BaseModel):
    """Advisory part of the decision; present only when acting."""

    message: str
    actions: list[ActionModel] = Field(min_length=1)
    priority: Literal["low", "medium", "high"] = "medium"


class ReasoningDecision(BaseModel):
    """The JSON object the reasoning service must return."""

    model_config = ConfigDict(populate_by_name=True)

    should_act: StrictBool = Field(alias="shouldAct")
    reasoning: str | None = None
    suggestion: SuggestionModel | None = None

    @field_validator("suggestion", mode="before")
    @classmethod
    def _ignore_suggestion_unless_acting(cls, value: Any, info: ValidationInfo) -> Any:
        if not info.data.get("should_act"):
            return None
        return value

    @model_validator(mode="after")
    def _require_suggestion_when_acting(self) -> "ReasoningDecision":
        if self.should_act and self.suggestion is None:
            raise ValueError("suggestion is required when shouldAct is true")
        return self


@dataclass
class ParseResult:
    """Either a decision or the reason it could not be parsed."""

    decision: ReasoningDecision | None = None
    error: ReasoningParseError | None = None

    @property
    def ok(self) -> bool:
        return self.decision is not None


def extract_json_object(text: str) -> str | None:
    """Return the first balanced {...} region, ignoring braces inside strings."""
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]

    return None


def parse_response(raw: str | None) -> ParseResult:
    """Parse a raw reasoning response into a ReasoningDecision."""
    if not raw:
        return ParseResult(error=ReasoningParseError("Empty response"))

    candidate = extract_json_object(raw)
    if candidate is None:
        return ParseResult(error=ReasoningParseError("No JSON found in response"))

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        return ParseResult(error=ReasoningParseError(f"Invalid JSON: {e}"))

    if not isinstance(data, dict):
        return ParseResult(error=ReasoningParseError("Response JSON is not an object"))

    try:
        decision = ReasoningDecision.model_validate(data)
    except PydanticValidationError as e:
        return ParseResult(error=ReasoningParseError(f"Invalid decision: {e}"))

    return ParseResult(decision=decision)
