"""API Route modules."""

from . import health, realtime, speech

__all__ = ["health", "realtime", "speech"]
