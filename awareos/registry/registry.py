"""Capability registry for pluggable app modules."""

import inspect
from dataclasses import dataclass
from typing import Any, Protocol

from ..errors import (
    DuplicateModuleError,
    NotFoundError,
    UnsupportedOperationError,
    ValidationError,
)
from ..logging_config import get_logger
from ..models import AppManifest

logger = get_logger(__name__)


class IAppModule(Protocol):
    """A pluggable app module.

    Only `manifest` is required. Modules may also define:

    - ``get_state() -> dict``: snapshot for the reasoning context
    - ``dispatch(action, params)``: sync or async action handler
    - ``init()``: sync or async startup hook
    """

    manifest: AppManifest


@dataclass
class RegisteredApp:
    """A module plus the optional capabilities detected at registration."""

    module: Any
    manifest: AppManifest
    has_state: bool
    has_dispatch: bool
    has_init: bool


def _has_callable(module: Any, name: str) -> bool:
    return callable(getattr(module, name, None))


class Registry:
    """Holds app modules by unique name, in registration order."""

    def __init__(self) -> None:
        self._apps: dict[str, RegisteredApp] = {}

    def register(self, module: Any) -> RegisteredApp:
        """Register a module. Rejects missing names and duplicates."""
        raw_manifest = getattr(module, "manifest", None)
        if raw_manifest is None:
            raise ValidationError("App must have a manifest with a name")

        if isinstance(raw_manifest, dict):
            manifest = AppManifest.from_dict(raw_manifest)
        else:
            manifest = raw_manifest
        if not getattr(manifest, "name", None):
            raise ValidationError("App must have a manifest with a name")

        if manifest.name in self._apps:
            raise DuplicateModuleError(f"App already registered: {manifest.name}")

        entry = RegisteredApp(
            module=module,
            manifest=manifest,
            has_state=_has_callable(module, "get_state"),
            has_dispatch=_has_callable(module, "dispatch"),
            has_init=_has_callable(module, "init"),
        )
        self._apps[manifest.name] = entry

        logger.info(
            "Registered app %s (capabilities=%s, actions=%s)",
            manifest.name,
            manifest.capabilities,
            manifest.actions,
            extra={"app": manifest.name},
        )
        return entry

    def get(self, name: str) -> Any | None:
        """Get a module by name, or None."""
        entry = self._apps.get(name)
        return entry.module if entry else None

    def get_all(self) -> list[Any]:
        return [entry.module for entry in self._apps.values()]

    def get_all_manifests(self) -> list[AppManifest]:
        """Manifests in registration order."""
        return [entry.manifest for entry in self._apps.values()]

    def find_by_capability(self, capability: str) -> list[Any]:
        return [
            entry.module
            for entry in self._apps.values()
            if capability in entry.manifest.capabilities
        ]

    def find_by_action(self, action: str) -> list[Any]:
        return [
            entry.module
            for entry in self._apps.values()
            if action in entry.manifest.actions
        ]

    def get_all_state(self) -> dict[str, Any]:
        """State snapshots of modules that expose get_state()."""
        return {
            name: entry.module.get_state()
            for name, entry in self._apps.items()
            if entry.has_state
        }

    async def dispatch(self, app_name: str, action: str, params: dict | None = None) -> Any:
        """Forward an action to a module; module errors propagate unchanged."""
        entry = self._apps.get(app_name)
        if entry is None:
            raise NotFoundError(f"App not found: {app_name}")
        if not entry.has_dispatch:
            raise UnsupportedOperationError(f"App {app_name} doesn't support actions")

        logger.info("Dispatching %s to %s", action, app_name, extra={"app": app_name})
        result = entry.module.dispatch(action, params or {})
        if inspect.isawaitable(result):
            result = await result
        return result

    async def init_all(self) -> None:
        """Run init() on every module that defines it."""
        for name, entry in self._apps.items():
            if not entry.has_init:
                continue
            result = entry.module.init()
            if inspect.isawaitable(result):
                await result
            logger.info("Initialized app %s", name, extra={"app": name})

    def __contains__(self, name: object) -> bool:
        return name in self._apps

    def __len__(self) -> int:
        return len(self._apps)
