"""Chat layer - one message per call into a (possibly new) bot session."""

from .dispatcher import ChatDispatcher

__all__ = ["ChatDispatcher"]
