"""Typed failures raised by the engine and mapped to responses in main."""

from __future__ import annotations

from typing import Any


class EngineError(Exception):
    code = "engine_error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def to_body(self) -> dict[str, Any]:
        return {"error": self.code, "message": self.message}


class NotFound(EngineError):
    """Referenced entity is missing or belongs to another user."""

    code = "not_found"


class Unauthenticated(EngineError):
    code = "unauthorized"


class InvalidInput(EngineError):
    code = "bad_request"


def require_user(user: Any) -> Any:
    """Guard for user-scoped calls — never proceed without a resolved user."""
    if user is None:
        raise Unauthenticated("No authenticated user")
    return user
