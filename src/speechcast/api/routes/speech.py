"""
Speech Routes

Content query and the presenter's authenticated controls.
"""

import math
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query, status
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from speechcast.api.deps import (
    client_identifier,
    get_auth_guard,
    get_broadcaster,
    get_content_provider,
    get_state_machine,
)
from speechcast.auth.guard import AuthFailure, AuthGuard
from speechcast.content.provider import ContentProvider
from speechcast.core.errors import ContentLoadError, GatewayRejection
from speechcast.core.models import resolve_language
from speechcast.presentation.state import PresentationStateMachine
from speechcast.realtime.broadcaster import PresentationBroadcaster

logger = structlog.get_logger()

router = APIRouter()


# ══════════════════════════════════════════════════════════════
# Request/Response Models
# ══════════════════════════════════════════════════════════════


class CredentialRequest(BaseModel):
    """Body of every presenter request."""

    password: Any = Field(
        default=None,
        validation_alias=AliasChoices("password", "credential"),
    )


class ActionResponse(BaseModel):
    """Result of a presenter request."""

    success: bool
    error: str | None = None


class ContentResponse(BaseModel):
    """Sections of one language plus the current presentation state."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sections: list[str]
    current_section_index: int
    is_rendering: bool
    rendered_text: str
    available_languages: list[str]


# ══════════════════════════════════════════════════════════════
# Guard
# ══════════════════════════════════════════════════════════════


REJECTION_STATUS = {
    AuthFailure.MALFORMED_REQUEST: status.HTTP_400_BAD_REQUEST,
    AuthFailure.INVALID_CREDENTIAL: status.HTTP_401_UNAUTHORIZED,
    AuthFailure.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
}

REJECTION_MESSAGES = {
    AuthFailure.MALFORMED_REQUEST: "Password required",
    AuthFailure.INVALID_CREDENTIAL: "Invalid password",
    AuthFailure.RATE_LIMITED: "Too many attempts. Please try again later.",
}


def require_presenter(
    guard: AuthGuard,
    client_id: str,
    body: CredentialRequest | None,
    invalid_message: str | None = None,
) -> None:
    """Run the guard, raising GatewayRejection unless authorized."""
    credential = body.password if body else None
    decision = guard.check(client_id, credential)
    if decision.authorized:
        return

    message = REJECTION_MESSAGES[decision.reason]
    if decision.reason is AuthFailure.INVALID_CREDENTIAL and invalid_message:
        message = invalid_message

    headers = None
    if decision.reason is AuthFailure.RATE_LIMITED:
        retry_after = guard.retry_after(client_id)
        if retry_after is not None:
            headers = {"Retry-After": str(math.ceil(retry_after))}

    raise GatewayRejection(REJECTION_STATUS[decision.reason], message, headers=headers)


# ══════════════════════════════════════════════════════════════
# Routes
# ══════════════════════════════════════════════════════════════


@router.get("/speech", response_model=ContentResponse)
async def get_speech(
    lang: str | None = Query(None),
    content: ContentProvider = Depends(get_content_provider),
    machine: PresentationStateMachine = Depends(get_state_machine),
) -> ContentResponse:
    """Sections for ``lang`` (default language if unsupported) and current state."""
    try:
        catalog = await content.load()
    except ContentLoadError as e:
        logger.error("Error loading speech", error=str(e))
        raise GatewayRejection(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to load speech content",
        ) from e

    language = resolve_language(lang)
    state = machine.state

    return ContentResponse(
        sections=catalog.sections_for(language),
        current_section_index=state.current_section_index,
        is_rendering=state.is_rendering,
        rendered_text=state.rendered_text,
        available_languages=catalog.available_languages(),
    )


@router.post("/auth", response_model=ActionResponse, response_model_exclude_none=True)
async def authenticate(
    body: CredentialRequest | None = None,
    guard: AuthGuard = Depends(get_auth_guard),
    client_id: str = Depends(client_identifier),
) -> ActionResponse:
    """Check the presenter password without changing anything."""
    require_presenter(guard, client_id, body)
    return ActionResponse(success=True)


@router.post("/next", response_model=ActionResponse, response_model_exclude_none=True)
async def advance_section(
    body: CredentialRequest | None = None,
    guard: AuthGuard = Depends(get_auth_guard),
    client_id: str = Depends(client_identifier),
    content: ContentProvider = Depends(get_content_provider),
    machine: PresentationStateMachine = Depends(get_state_machine),
    broadcaster: PresentationBroadcaster = Depends(get_broadcaster),
) -> ActionResponse:
    """Advance to the next section and broadcast it to every viewer."""
    require_presenter(guard, client_id, body, invalid_message="Unauthorized")

    try:
        catalog = await content.load()
    except ContentLoadError as e:
        logger.error("Error advancing section", error=str(e))
        raise GatewayRejection(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to advance section",
        ) from e

    # No await between the transition and the broadcast.
    result = machine.advance(catalog)
    if result.no_more_sections:
        return ActionResponse(success=False, error="No more sections")

    broadcaster.section_advanced(result)
    return ActionResponse(success=True)


@router.post("/reset", response_model=ActionResponse, response_model_exclude_none=True)
async def reset_presentation(
    body: CredentialRequest | None = None,
    guard: AuthGuard = Depends(get_auth_guard),
    client_id: str = Depends(client_identifier),
    machine: PresentationStateMachine = Depends(get_state_machine),
    broadcaster: PresentationBroadcaster = Depends(get_broadcaster),
) -> ActionResponse:
    """Return to the not-started state and tell every viewer."""
    require_presenter(guard, client_id, body, invalid_message="Unauthorized")

    machine.reset()
    broadcaster.reset_occurred()
    return ActionResponse(success=True)
