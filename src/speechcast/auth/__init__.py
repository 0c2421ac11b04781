"""Presenter authentication."""

from .guard import AttemptRecord, AuthDecision, AuthFailure, AuthGuard

__all__ = ["AttemptRecord", "AuthDecision", "AuthFailure", "AuthGuard"]
