"""Middleware module for MovieCatalog backend."""

from moviecatalog.middleware.bearer_token import (
    BearerTokenMiddleware,
    GateAction,
    GateDecision,
    evaluate_authorization,
)

__all__ = [
    "BearerTokenMiddleware",
    "GateAction",
    "GateDecision",
    "evaluate_authorization",
]
