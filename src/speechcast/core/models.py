"""
Speechcast Core Domain Models

Pydantic models for the presentation content shared by the content
provider, the state machine and the gateway.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════
# Enums
# ══════════════════════════════════════════════════════════════


class Language(str, Enum):
    """Languages a presentation can be translated into."""

    EN = "en"
    FR = "fr"
    DE = "de"


DEFAULT_LANGUAGE = Language.EN
SUPPORTED_LANGUAGES: tuple[str, ...] = tuple(language.value for language in Language)


def resolve_language(code: str | None) -> Language:
    """Whitelist a language code, falling back to the default language."""
    if code in SUPPORTED_LANGUAGES:
        return Language(code)
    return DEFAULT_LANGUAGE


# ══════════════════════════════════════════════════════════════
# Base Models
# ══════════════════════════════════════════════════════════════


class SpeechcastModel(BaseModel):
    """Base model with common configuration."""

    model_config = {"from_attributes": True, "populate_by_name": True}


# ══════════════════════════════════════════════════════════════
# Content Catalog
# ══════════════════════════════════════════════════════════════


class ContentCatalog(SpeechcastModel):
    """
    Per-language ordered sections of one presentation.

    The default language is mandatory and defines how many sections the
    presentation has; every other language may be shorter or absent.
    """

    sections: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("sections")
    @classmethod
    def require_default_language(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        if DEFAULT_LANGUAGE.value not in v:
            raise ValueError(
                f"catalog must contain the default language '{DEFAULT_LANGUAGE.value}'"
            )
        return v

    @classmethod
    def from_document(cls, document: Any) -> "ContentCatalog":
        """
        Build a catalog from a decoded content file.

        Accepts the language mapping ``{"en": [...], "fr": [...]}`` as well
        as the older single-language ``{"sections": [...]}`` layout.
        """
        if (
            isinstance(document, dict)
            and set(document) == {"sections"}
            and isinstance(document["sections"], list)
        ):
            document = {DEFAULT_LANGUAGE.value: document["sections"]}
        return cls(sections=document)

    def to_document(self) -> dict[str, list[str]]:
        return {language: list(texts) for language, texts in self.sections.items()}

    @property
    def languages(self) -> list[str]:
        """Languages present in the catalog, in file order."""
        return list(self.sections)

    @property
    def section_count(self) -> int:
        """Number of sections in the default language."""
        return len(self.sections[DEFAULT_LANGUAGE.value])

    def available_languages(self) -> list[str]:
        """Supported languages that have content, in enum order."""
        return [code for code in SUPPORTED_LANGUAGES if code in self.sections]

    def sections_for(self, language: Language | str) -> list[str]:
        """Sections of one language; the default language when it is absent."""
        code = language.value if isinstance(language, Language) else language
        texts = self.sections.get(code)
        if texts is None:
            texts = self.sections[DEFAULT_LANGUAGE.value]
        return list(texts)

    def text_at(self, language: Language | str, index: int) -> str:
        """Section text for one language; empty when missing or out of range."""
        code = language.value if isinstance(language, Language) else language
        texts = self.sections.get(code) or []
        if 0 <= index < len(texts):
            return texts[index]
        return ""

    def texts_at(self, index: int, languages: list[str] | None = None) -> dict[str, str]:
        """Section text at ``index`` keyed by language (catalog languages by default)."""
        if languages is None:
            languages = self.languages
        return {language: self.text_at(language, index) for language in languages}
