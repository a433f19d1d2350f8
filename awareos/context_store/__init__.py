"""ContextStore module."""

from .store import DEFAULT_CONFIDENCE, RATING_LOOKBACK, ContextStore, IContextStore

__all__ = ["DEFAULT_CONFIDENCE", "RATING_LOOKBACK", "ContextStore", "IContextStore"]
