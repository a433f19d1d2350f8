"""Application bootstrap and lifecycle management."""

import os
from typing import Protocol

from .apps import CalendarApp
from .config import get_api_key, resolve_db_path
from .context_store import ContextStore
from .event_bus import EventBus
from .llm import ILLMProvider, LLMProvider
from .logging_config import get_logger
from .orchestrator import Orchestrator
from .registry import Registry
from .storage import Storage

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...

    async def reset(self) -> None:
        """Wipe the context store."""
        ...


class Application:
    """Main application bootstrap.

    Every component is constructed here and handed its dependencies, so
    several isolated applications can run in one process (tests).
    """

    def __init__(
        self,
        db_path: str | None = None,
        api_key: str | None = None,
        llm_provider: ILLMProvider | None = None,
    ):
        env_db_path = os.getenv("DATABASE_URL") if db_path is None else db_path
        self._db_path = resolve_db_path(env_db_path)
        self._api_key = api_key if api_key is not None else get_api_key()
        self._llm: ILLMProvider | None = llm_provider

        # Components (will be initialized in start())
        self._context_store: ContextStore | None = None
        self._event_bus: EventBus | None = None
        self._registry: Registry | None = None
        self._calendar: CalendarApp | None = None
        self._orchestrator: Orchestrator | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")

        # 1. Context store (storage backend only)
        self._context_store = ContextStore(Storage(self._db_path))
        await self._context_store.init()
        logger.info("Context store initialized")

        # 2. EventBus (no dependencies)
        self._event_bus = EventBus()

        # 3. Registry + app modules (apps publish on the EventBus)
        self._registry = Registry()
        self._calendar = CalendarApp(self._event_bus)
        self._registry.register(self._calendar)
        await self._registry.init_all()
        logger.info("Apps registered: %s", [m.name for m in self._registry.get_all_manifests()])

        # 4. LLM provider (optional: observe-only without a key)
        if self._llm is None and self._api_key:
            self._llm = LLMProvider(api_key=self._api_key)

        # 5. Orchestrator (depends on everything above)
        self._orchestrator = Orchestrator(
            event_bus=self._event_bus,
            registry=self._registry,
            context_store=self._context_store,
            llm_provider=self._llm,
        )
        await self._orchestrator.init()
        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if self._orchestrator:
            await self._orchestrator.stop()
        if self._calendar:
            await self._calendar.stop()
        if self._context_store:
            await self._context_store.close()
            logger.info("Context store closed")

    async def reset(self) -> None:
        """Wipe all context data (profile, patterns, preferences, log)."""
        if self._orchestrator:
            await self._orchestrator.wait_idle()
        if self._context_store:
            await self._context_store.clear_all()
            logger.info("Reset complete")

    @property
    def context_store(self) -> ContextStore:
        """Get context store instance."""
        if not self._context_store:
            raise RuntimeError("Application not started")
        return self._context_store

    @property
    def event_bus(self) -> EventBus:
        """Get event bus instance."""
        if not self._event_bus:
            raise RuntimeError("Application not started")
        return self._event_bus

    @property
    def registry(self) -> Registry:
        """Get registry instance."""
        if not self._registry:
            raise RuntimeError("Application not started")
        return self._registry

    @property
    def orchestrator(self) -> Orchestrator:
        """Get orchestrator instance."""
        if not self._orchestrator:
            raise RuntimeError("Application not started")
        return self._orchestrator
