"""Core domain models and errors."""

from .errors import (
    ConfigurationError,
    ContentLoadError,
    GatewayRejection,
    SpeechcastError,
)
from .models import (
    DEFAULT_LANGUAGE,
    SUPPORTED_LANGUAGES,
    ContentCatalog,
    Language,
    resolve_language,
)

__all__ = [
    "ConfigurationError",
    "ContentLoadError",
    "GatewayRejection",
    "SpeechcastError",
    "DEFAULT_LANGUAGE",
    "SUPPORTED_LANGUAGES",
    "ContentCatalog",
    "Language",
    "resolve_language",
]
