"""Registry module."""

from .registry import IAppModule, RegisteredApp, Registry

__all__ = ["IAppModule", "RegisteredApp", "Registry"]
