"""
Presentation State Machine

The single authoritative record of where the presentation is. Transitions
are plain synchronous methods: on one event loop they cannot interleave,
so callers that fan out immediately after a transition preserve order.
"""

from dataclasses import dataclass, field
from enum import Enum

import structlog

from speechcast.core.models import ContentCatalog

logger = structlog.get_logger()


NOT_STARTED = -1


class PresentationPhase(str, Enum):
    """Coarse position of the presentation within its catalog."""

    IDLE = "idle"
    ACTIVE = "active"
    FINAL = "final"


@dataclass
class PresentationState:
    """Mutable presentation state shared by every viewer."""

    current_section_index: int = NOT_STARTED
    is_rendering: bool = False
    # Reserved for server-side rendering; cleared on every transition.
    rendered_text: str = ""

    def copy(self) -> "PresentationState":
        return PresentationState(
            current_section_index=self.current_section_index,
            is_rendering=self.is_rendering,
            rendered_text=self.rendered_text,
        )


@dataclass(frozen=True)
class AdvanceResult:
    """Outcome of an advance request."""

    advanced: bool
    index: int
    text_by_language: dict[str, str] = field(default_factory=dict)

    @property
    def no_more_sections(self) -> bool:
        return not self.advanced


class PresentationStateMachine:
    """
    Owns the presentation state and its two transitions.

    - ``advance``: Idle/Active -> next section; refused when Final.
    - ``reset``: any state -> Idle.
    """

    def __init__(self) -> None:
        self._state = PresentationState()

    @property
    def state(self) -> PresentationState:
        """A copy of the current state."""
        return self._state.copy()

    @property
    def current_section_index(self) -> int:
        return self._state.current_section_index

    def phase(self, catalog: ContentCatalog) -> PresentationPhase:
        index = self._state.current_section_index
        if index == NOT_STARTED:
            return PresentationPhase.IDLE
        if index >= catalog.section_count - 1:
            return PresentationPhase.FINAL
        return PresentationPhase.ACTIVE

    def advance(self, catalog: ContentCatalog) -> AdvanceResult:
        """
        Move to the next section.

        Returns a result with ``advanced=False`` and leaves the state
        untouched when the last section of the default language is
        already showing.
        """
        index = self._state.current_section_index
        if index >= catalog.section_count - 1:
            logger.info(
                "Advance refused, no more sections",
                current_section_index=index,
                section_count=catalog.section_count,
            )
            return AdvanceResult(advanced=False, index=index)

        self._state.current_section_index = index + 1
        self._state.is_rendering = True
        self._state.rendered_text = ""

        logger.info(
            "Section advanced",
            current_section_index=self._state.current_section_index,
            section_count=catalog.section_count,
        )

        return AdvanceResult(
            advanced=True,
            index=self._state.current_section_index,
            text_by_language=catalog.texts_at(self._state.current_section_index),
        )

    def reset(self) -> PresentationState:
        """Return to the not-started state. Always succeeds."""
        self._state.current_section_index = NOT_STARTED
        self._state.is_rendering = False
        self._state.rendered_text = ""

        logger.info("Presentation reset")

        return self.state
