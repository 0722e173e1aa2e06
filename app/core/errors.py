"""
Error taxonomy shared by controllers and routes.

Controllers raise these; app/main.py turns them into JSON responses.
"""
from __future__ import annotations

from typing import Any


class AppError(Exception):
    status_code = 500
    default_message = "Request failed"

    def __init__(self, message: str | None = None, error: str | None = None):
        self.message = message or self.default_message
        self.error = error or self.message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "message": self.message, "error": self.error}


class ValidationError(AppError):
    status_code = 422
    default_message = "Validation failed"


class AuthError(AppError):
    status_code = 401
    default_message = "Unauthorized"

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message}


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Conflict detected: The venue is already booked for this time."

    def __init__(self, conflicts: list[dict], message: str | None = None):
        super().__init__(message, "Conflict Detected")
        self.conflicts = conflicts

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["conflictingEvents"] = self.conflicts
        return out


class StorageError(AppError):
    default_message = "Storage operation failed"


class RenderError(AppError):
    default_message = "Certificate rendering failed"


class IssuanceError(AppError):
    default_message = "Failed to generate certificate"
