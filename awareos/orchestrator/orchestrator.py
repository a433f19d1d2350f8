"""Orchestrator: gates bus events, reasons about them, executes approved actions."""

import asyncio
import uuid
from collections import OrderedDict
from datetime import datetime
from typing import Any, Callable, Protocol

from ..context_store import IContextStore
from ..errors import ActionExecutionError, NotFoundError
from ..event_bus import IEventBus, Unsubscribe
from ..llm import ILLMProvider, LLMProvider
from ..logging_config import get_logger
from ..models import (
    ACTION_COMPLETE_TOPIC,
    SUGGESTION_TOPIC,
    WILDCARD,
    ActionOutcome,
    ActionRequest,
    LogKind,
    Suggestion,
)
from ..models.events import ORCHESTRATOR_PREFIX
from ..registry import Registry
from .gating import evaluate_event
from .parser import parse_response
from .prompt import build_prompt, time_of_day

logger = get_logger(__name__)

MAX_TOKENS = 1024
MAX_PENDING_SUGGESTIONS = 100


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _partial_request(data: Any) -> ActionRequest:
    """Best-effort request from a malformed action, for failure reporting."""
    if not isinstance(data, dict):
        return ActionRequest(app="", action="")
    params = data.get("params")
    return ActionRequest(
        app=str(data.get("app") or ""),
        action=str(data.get("action") or ""),
        params=dict(params) if isinstance(params, dict) else {},
    )


class IOrchestrator(Protocol):
    """Reasoning core between the event bus and the app modules."""

    async def init(self, api_key: str | None = None) -> None:
        """Subscribe to all bus events."""
        ...

    async def approve_suggestion(
        self, suggestion_id: str, actions: list[ActionRequest] | None = None
    ) -> list[ActionOutcome]:
        """Execute a suggestion's actions."""
        ...

    async def dismiss_suggestion(
        self,
        suggestion_id: str,
        reason: str | None = None,
        suppress_future: bool = False,
    ) -> None:
        """Record a dismissal, optionally as a suppression preference."""
        ...


class Orchestrator:
    """Observes every bus event and turns important ones into suggestions.

    Without an LLM provider the orchestrator runs observe-only: events are
    logged and gated, but no reasoning call is made.
    """

    def __init__(
        self,
        event_bus: IEventBus,
        registry: Registry,
        context_store: IContextStore,
        llm_provider: ILLMProvider | None = None,
        clock: Callable[[], datetime] | None = None,
        coalesce_triggers: bool = False,
    ):
        self._event_bus = event_bus
        self._registry = registry
        self._context_store = context_store
        self._llm = llm_provider
        self._clock = clock or _local_now
        self._coalesce_triggers = coalesce_triggers

        self._unsubscribe: Unsubscribe | None = None
        self._tasks: set[asyncio.Task] = set()
        self._pending: OrderedDict[str, Suggestion] = OrderedDict()
        self._reasoning_topics: set[str] = set()

    @property
    def reasoning_enabled(self) -> bool:
        return self._llm is not None

    @property
    def initialized(self) -> bool:
        return self._unsubscribe is not None

    async def init(self, api_key: str | None = None) -> None:
        """Subscribe to all bus events. Without a key or provider, observe only."""
        if self._llm is None and api_key:
            self._llm = LLMProvider(api_key=api_key)

        if self._unsubscribe is None:
            self._unsubscribe = self._event_bus.on(WILDCARD, self._on_event)

        logger.info(
            "Orchestrator listening (reasoning %s)",
            "enabled" if self.reasoning_enabled else "disabled",
        )

    async def stop(self) -> None:
        """Unsubscribe and let in-flight cycles finish."""
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None
        await self.wait_idle()

    async def wait_idle(self) -> None:
        """Wait until no event handling is in flight."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def pending_suggestions(self) -> list[Suggestion]:
        return list(self._pending.values())

    def get_suggestion(self, suggestion_id: str) -> Suggestion | None:
        return self._pending.get(suggestion_id)

    def _remember(self, suggestion: Suggestion) -> None:
        """Hold a suggestion for approval, evicting the oldest beyond the cap."""
        self._pending[suggestion.id] = suggestion
        while len(self._pending) > MAX_PENDING_SUGGESTIONS:
            evicted_id, _ = self._pending.popitem(last=False)
            logger.info(
                "Pending suggestion %s evicted",
                evicted_id,
                extra={"suggestion_id": evicted_id},
            )

    # Event intake
    def _on_event(self, topic: str, payload: Any) -> None:
        """Wildcard bus handler; schedules handle_event on the running loop."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(
                "No running event loop, dropping event %s", topic, extra={"topic": topic}
            )
            return

        task = loop.create_task(self._handle_event_safely(topic, payload))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _handle_event_safely(self, topic: str, payload: Any) -> None:
        try:
            await self.handle_event(topic, payload)
        except Exception:
            logger.exception("Error handling event %s", topic, extra={"topic": topic})

    async def handle_event(self, topic: str, payload: Any) -> None:
        """Log the event, then reason about it if it passes the gate."""
        payload = payload if payload is not None else {}
        source = payload.get("source", "unknown") if isinstance(payload, dict) else "unknown"

        await self._context_store.log_action(
            LogKind.EVENT_RECEIVED,
            {"topic": topic, "payload": payload, "source": source},
        )

        # Our own suggestion/completion events are audited, never reasoned about
        if topic.startswith(ORCHESTRATOR_PREFIX):
            return

        if self.evaluate_event(topic, payload):
            await self.reason(topic, payload)

    def evaluate_event(self, topic: str, payload: Any) -> bool:
        return evaluate_event(topic, payload)

    # Reasoning
    def build_context(self, trigger: str, payload: Any) -> dict:
        """Snapshot of everything the reasoning service gets to see."""
        now = self._clock()
        return {
            "trigger": {
                "topic": trigger,
                "payload": payload,
                "timestamp": now.isoformat(),
            },
            "app_state": self._registry.get_all_state(),
            "capabilities": [m.to_dict() for m in self._registry.get_all_manifests()],
            "user_context": self._context_store.get_full_context(),
            "time": {
                "now": now.isoformat(),
                "day_of_week": now.strftime("%A"),
                "time_of_day": time_of_day(now.hour),
            },
        }

    async def reason(self, trigger: str, payload: Any) -> Suggestion | None:
        """Run one reasoning cycle. Returns the emitted suggestion, if any."""
        if self._llm is None:
            logger.info(
                "No reasoning provider configured, would reason about %s",
                trigger,
                extra={"topic": trigger},
            )
            return None

        if self._coalesce_triggers and trigger in self._reasoning_topics:
            logger.info(
                "Reasoning already in flight for %s, skipping",
                trigger,
                extra={"topic": trigger},
            )
            return None

        self._reasoning_topics.add(trigger)
        try:
            try:
                context = self.build_context(trigger, payload)
                response = await self._llm.complete(
                    messages=[{"role": "user", "content": build_prompt(context)}],
                    max_tokens=MAX_TOKENS,
                )
            except Exception as e:
                logger.error("Reasoning failed for %s: %s", trigger, e, extra={"topic": trigger})
                await self._context_store.log_action(
                    LogKind.REASONING_ERROR,
                    {"trigger": trigger, "error": str(e)},
                )
                return None

            return await self._handle_response(response, context)
        finally:
            self._reasoning_topics.discard(trigger)

    async def _handle_response(self, response: str, context: dict) -> Suggestion | None:
        trigger = context["trigger"]["topic"]
        result = parse_response(response)

        if not result.ok:
            logger.warning(
                "Failed to parse reasoning response for %s: %s",
                trigger,
                result.error,
                extra={"topic": trigger},
            )
            await self._context_store.log_action(
                LogKind.REASONING_PARSE_ERROR,
                {"trigger": trigger, "error": str(result.error), "response": response[:1000]},
            )
            return None

        decision = result.decision
        await self._context_store.log_action(
            LogKind.REASONING_COMPLETE,
            {
                "trigger": trigger,
                "should_act": decision.should_act,
                "reasoning": decision.reasoning,
                "suggestion": decision.suggestion.model_dump() if decision.suggestion else None,
            },
        )

        if not decision.should_act:
            logger.info("No action needed for %s: %s", trigger, decision.reasoning)
            return None

        suggestion = Suggestion(
            id=str(uuid.uuid4()),
            message=decision.suggestion.message,
            actions=[
                ActionRequest(app=a.app, action=a.action, params=a.params or {})
                for a in decision.suggestion.actions
            ],
            priority=decision.suggestion.priority,
            context=context["trigger"],
        )
        self._remember(suggestion)

        logger.info(
            "Suggestion %s emitted for %s",
            suggestion.id,
            trigger,
            extra={"topic": trigger, "suggestion_id": suggestion.id},
        )
        self._event_bus.emit(SUGGESTION_TOPIC, suggestion.to_payload())
        return suggestion

    # Execution
    async def execute_actions(
        self, actions: list[ActionRequest | dict]
    ) -> list[ActionOutcome]:
        """Dispatch actions one by one; a failure does not stop the rest."""
        outcomes: list[ActionOutcome] = []

        for raw in actions:
            action = raw if isinstance(raw, ActionRequest) else _partial_request(raw)

            try:
                if not isinstance(raw, ActionRequest):
                    action = ActionRequest.from_dict(raw)
                result = await self._registry.dispatch(action.app, action.action, action.params)
            except Exception as e:
                error = ActionExecutionError(action.app, action.action, str(e))
                logger.warning("Action failed: %s", error, extra={"app": action.app})
                outcomes.append(ActionOutcome(action=action, success=False, error=error.message))
                await self._context_store.log_action(
                    LogKind.ACTION_FAILED,
                    {
                        "app": action.app,
                        "action": action.action,
                        "params": action.params,
                        "error": error.message,
                    },
                )
                continue

            outcomes.append(ActionOutcome(action=action, success=True, result=result))
            await self._context_store.log_action(
                LogKind.ACTION_EXECUTED,
                {
                    "app": action.app,
                    "action": action.action,
                    "params": action.params,
                    "result": result,
                },
            )

        return outcomes

    async def approve_suggestion(
        self, suggestion_id: str, actions: list[ActionRequest | dict] | None = None
    ) -> list[ActionOutcome]:
        """Apply a suggestion. Uses the pending suggestion's actions if none are given."""
        pending = self._pending.pop(suggestion_id, None)
        if actions is None:
            if pending is None:
                raise NotFoundError(f"Suggestion not found: {suggestion_id}")
            actions = pending.actions

        logger.info(
            "Suggestion %s approved",
            suggestion_id,
            extra={"suggestion_id": suggestion_id},
        )
        await self._context_store.log_action(
            LogKind.SUGGESTION_APPROVED,
            {"suggestion_id": suggestion_id, "action_count": len(actions)},
        )

        outcomes = await self.execute_actions(actions)

        self._event_bus.emit(
            ACTION_COMPLETE_TOPIC,
            {
                "suggestionId": suggestion_id,
                "results": [outcome.to_dict() for outcome in outcomes],
            },
        )
        return outcomes

    async def dismiss_suggestion(
        self,
        suggestion_id: str,
        reason: str | None = None,
        suppress_future: bool = False,
    ) -> None:
        """Record a dismissal; with suppress_future and a reason, remember it."""
        self._pending.pop(suggestion_id, None)

        logger.info(
            "Suggestion %s dismissed (%s)",
            suggestion_id,
            reason,
            extra={"suggestion_id": suggestion_id},
        )
        await self._context_store.log_action(
            LogKind.SUGGESTION_DISMISSED,
            {
                "suggestion_id": suggestion_id,
                "reason": reason,
                "suppress_future": suppress_future,
            },
        )

        if suppress_future and reason:
            await self._context_store.set_preference(
                f"suppress_{reason}",
                {"enabled": True, "created_at": self._clock().isoformat()},
            )
