"""
API Dependencies

Components are created once per application in ``create_app`` and
stored on ``app.state``; routes receive them through these dependencies.
"""

from fastapi import Depends, Request
from starlette.requests import HTTPConnection

from speechcast.auth.guard import AuthGuard
from speechcast.config import Settings
from speechcast.content.provider import ContentProvider
from speechcast.presentation.state import PresentationStateMachine
from speechcast.realtime.broadcaster import PresentationBroadcaster
from speechcast.realtime.connection import ChannelRegistry


def get_app_settings(connection: HTTPConnection) -> Settings:
    return connection.app.state.settings


def get_content_provider(connection: HTTPConnection) -> ContentProvider:
    return connection.app.state.content


def get_state_machine(connection: HTTPConnection) -> PresentationStateMachine:
    return connection.app.state.machine


def get_auth_guard(connection: HTTPConnection) -> AuthGuard:
    return connection.app.state.guard


def get_channel_registry(connection: HTTPConnection) -> ChannelRegistry:
    return connection.app.state.registry


def get_broadcaster(connection: HTTPConnection) -> PresentationBroadcaster:
    return connection.app.state.broadcaster


def client_identifier(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> str:
    """Network identity of the caller, used as the rate-limit key."""
    if settings.trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            first_hop = forwarded.split(",")[0].strip()
            if first_hop:
                return first_hop

    if request.client and request.client.host:
        return request.client.host
    return "unknown"
