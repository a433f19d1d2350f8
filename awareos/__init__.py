"""AwareOS orchestration core."""

from .app import Application, IApplication
from .apps import CalendarApp
from .context_store import ContextStore, IContextStore
from .errors import (
    ActionExecutionError,
    AwareOSError,
    DuplicateModuleError,
    NotFoundError,
    ReasoningParseError,
    ReasoningTransportError,
    UnsupportedOperationError,
    ValidationError,
)
from .event_bus import EventBus, IEventBus
from .llm import ILLMProvider, LLMProvider
from .models import (
    ActionOutcome,
    ActionRequest,
    AppManifest,
    KeyedEntry,
    LogEntry,
    LogKind,
    Pattern,
    Suggestion,
)
from .orchestrator import IOrchestrator, Orchestrator
from .registry import IAppModule, Registry
from .storage import IStorage, Storage

__all__ = [
    # Application
    "Application",
    "IApplication",
    # Models
    "ActionOutcome",
    "ActionRequest",
    "AppManifest",
    "KeyedEntry",
    "LogEntry",
    "LogKind",
    "Pattern",
    "Suggestion",
    # Errors
    "AwareOSError",
    "ValidationError",
    "DuplicateModuleError",
    "NotFoundError",
    "UnsupportedOperationError",
    "ReasoningTransportError",
    "ReasoningParseError",
    "ActionExecutionError",
    # Components
    "IStorage",
    "Storage",
    "IContextStore",
    "ContextStore",
    "IEventBus",
    "EventBus",
    "IAppModule",
    "Registry",
    "ILLMProvider",
    "LLMProvider",
    "IOrchestrator",
    "Orchestrator",
    "CalendarApp",
]
