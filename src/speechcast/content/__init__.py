"""Presentation content storage."""

from .defaults import DEFAULT_SECTIONS, default_catalog
from .provider import ContentProvider

__all__ = ["ContentProvider", "DEFAULT_SECTIONS", "default_catalog"]
