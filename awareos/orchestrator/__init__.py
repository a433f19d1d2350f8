"""Orchestrator module."""

from .gating import IMPORTANT_TOPICS, evaluate_event
from .orchestrator import IOrchestrator, Orchestrator
from .parser import ParseResult, ReasoningDecision, extract_json_object, parse_response
from .prompt import build_prompt, time_of_day

__all__ = [
    "IMPORTANT_TOPICS",
    "IOrchestrator",
    "Orchestrator",
    "ParseResult",
    "ReasoningDecision",
    "build_prompt",
    "evaluate_event",
    "extract_json_object",
    "parse_response",
    "time_of_day",
]
