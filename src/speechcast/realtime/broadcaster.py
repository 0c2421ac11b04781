"""
Presentation Broadcaster

Turns presentation transitions into channel messages: a snapshot for
each newly connected viewer and an event per transition for everyone.
"""

from typing import Any, Sequence

import structlog

from speechcast.core.models import SUPPORTED_LANGUAGES, ContentCatalog
from speechcast.presentation.state import (
    NOT_STARTED,
    AdvanceResult,
    PresentationStateMachine,
)

from .connection import ChannelRegistry, ViewerConnection
from .protocol import (
    ChannelMessage,
    ChannelMessageType,
    SectionAdvancedPayload,
    SnapshotPayload,
)

logger = structlog.get_logger()


class PresentationBroadcaster:
    """
    Fans presentation events out to every registered channel.

    All methods are synchronous. Callers transition the state machine and
    broadcast without awaiting in between, which keeps every channel's
    view of the transitions in commit order.
    """

    def __init__(
        self,
        registry: ChannelRegistry,
        machine: PresentationStateMachine,
        languages: Sequence[str] = SUPPORTED_LANGUAGES,
    ) -> None:
        self._registry = registry
        self._machine = machine
        self._languages = list(languages)

    @property
    def registry(self) -> ChannelRegistry:
        return self._registry

    def snapshot(self, catalog: ContentCatalog) -> ChannelMessage:
        """Current state plus the text of every configured language."""
        state = self._machine.state

        if state.current_section_index == NOT_STARTED:
            text_by_language = {language: "" for language in self._languages}
        else:
            text_by_language = catalog.texts_at(state.current_section_index, self._languages)

        return ChannelMessage(
            type=ChannelMessageType.SNAPSHOT,
            payload=SnapshotPayload(
                current_section_index=state.current_section_index,
                is_rendering=state.is_rendering,
                rendered_text=state.rendered_text,
                text_by_language=text_by_language,
            ).to_payload(),
        )

    def admit(self, connection: ViewerConnection, catalog: ContentCatalog) -> None:
        """Send the snapshot to a new channel and start broadcasting to it."""
        self._registry.register(connection, self.snapshot(catalog))

    def section_advanced(self, result: AdvanceResult) -> int:
        """Broadcast a successful advance. Returns channels notified."""
        if not result.advanced:
            raise ValueError("Cannot broadcast an advance that did not happen")

        notified = self._registry.broadcast(
            ChannelMessage(
                type=ChannelMessageType.SECTION_ADVANCED,
                payload=SectionAdvancedPayload(
                    index=result.index,
                    text_by_language=result.text_by_language,
                ).to_payload(),
            )
        )

        logger.info("Broadcast section advanced", index=result.index, notified=notified)
        return notified

    def reset_occurred(self) -> int:
        """Broadcast a reset. Returns channels notified."""
        notified = self._registry.broadcast(
            ChannelMessage(type=ChannelMessageType.RESET_OCCURRED)
        )

        logger.info("Broadcast reset", notified=notified)
        return notified

    def get_stats(self, catalog: ContentCatalog | None = None) -> dict[str, Any]:
        """Registry statistics plus the presentation position."""
        stats = {
            **self._registry.get_stats(),
            "current_section_index": self._machine.current_section_index,
        }
        if catalog is not None:
            stats["phase"] = self._machine.phase(catalog).value
        return stats
