"""Rendering of the reasoning context into a single instruction."""

import json

PROMPT_TEMPLATE = """You are the orchestration layer for AwareOS, a personal operating system. \
Reason about the event below and decide whether to suggest an action to the user.

## Current Trigger
Event: {topic}
Data: {payload}

## App States
{app_state}

## Available Apps and Their Capabilities
{capabilities}

## User Context
{user_context}

## Current Time
{day_of_week}, {time_of_day}
{now}

## Instructions
1. Analyze the trigger in light of the user's state, patterns and preferences.
2. Suggest something only if it matters to the user right now.
3. Respect preferences about what the user does not want to hear about.
4. Only propose actions that the listed apps support.

## Response Format
Respond with a single JSON object and nothing else:
{{
  "shouldAct": true or false,
  "reasoning": "Brief explanation of your thinking",
  "suggestion": {{
    "message": "What to say to the user (conversational, not robotic)",
    "actions": [
      {{"app": "appName", "action": "actionName", "params": {{}}}}
    ],
    "priority": "low" | "medium" | "high"
  }}
}}

If shouldAct is false, include only "shouldAct" and "reasoning".
"""


def time_of_day(hour: int) -> str:
    """Bucket an hour (0-23) into night/morning/afternoon/evening."""
    if hour < 6:
        return "night"
    if hour < 12:
        return "morning"
    if hour < 17:
        return "afternoon"
    if hour < 21:
        return "evening"
    return "night"


def _dump(value) -> str:
    return json.dumps(value, indent=2, default=str)


def build_prompt(context: dict) -> str:
    trigger = context["trigger"]
    time = context["time"]
    return PROMPT_TEMPLATE.format(
        topic=trigger["topic"],
        payload=_dump(trigger["payload"]),
        app_state=_dump(context["app_state"]),
        capabilities=_dump(context["capabilities"]),
        user_context=_dump(context["user_context"]),
        day_of_week=time["day_of_week"],
        time_of_day=time["time_of_day"],
        now=time["now"],
    )
