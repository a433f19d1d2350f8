"""EventBus topic names."""

# Subscribing to this topic receives every event as (topic, payload)
WILDCARD = "*"

# Topics emitted by the orchestrator for the presentation layer
SUGGESTION_TOPIC = "orchestrator_suggestion"
ACTION_COMPLETE_TOPIC = "orchestrator_action_complete"
ORCHESTRATOR_PREFIX = "orchestrator_"
