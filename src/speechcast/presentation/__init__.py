"""Presentation state and transitions."""

from .state import (
    NOT_STARTED,
    AdvanceResult,
    PresentationPhase,
    PresentationState,
    PresentationStateMachine,
)

__all__ = [
    "NOT_STARTED",
    "AdvanceResult",
    "PresentationPhase",
    "PresentationState",
    "PresentationStateMachine",
]
