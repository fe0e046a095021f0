"""
lotobonheur/utils/errors.py
Error taxonomy shared by the algorithms, pipeline and HTTP layer.
"""
from __future__ import annotations


class LotoBonheurError(Exception):
    """Base error. `status` is the HTTP status used when it reaches the API."""

    status: int = 500
    public_message: str = "Erreur interne du serveur"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message

    def to_payload(self) -> dict:
        return {"error": self.message}


class InsufficientDataError(LotoBonheurError):
    """History too short for an algorithm. Recovered locally by the fallback."""

    status = 422

    def __init__(self, required: int, available: int):
        super().__init__(f"Need at least {required} draws, got {available}")
        self.required = required
        self.available = available


class RequestValidationError(LotoBonheurError):
    status = 400

    def __init__(self, message: str, reason: str = "invalid_request", details: list | None = None):
        super().__init__(message)
        self.reason = reason
        self.details = details or []

    def to_payload(self) -> dict:
        payload = {"error": self.message, "reason": self.reason}
        if self.details:
            payload["details"] = self.details
        return payload


class AuthorizationError(LotoBonheurError):
    """401 for a missing or invalid token, 403 for a caller without the admin role."""

    status = 401

    def __init__(self, message: str, status: int = 401):
        super().__init__(message)
        self.status = status


class UpstreamStoreError(LotoBonheurError):
    """A Supabase read or write failed. Detail is logged, never returned."""

    status = 500

    def __init__(self, operation: str, detail: str = ""):
        super().__init__("Erreur de stockage, réessayez plus tard")
        self.operation = operation
        self.detail = detail
