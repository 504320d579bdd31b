"""Error taxonomy shared by the services and the API layer.

Every rejection carries a human-readable ``reason`` so callers can tell a wrong
password apart from a post they do not own or a missing required field.
"""
from __future__ import annotations

from fastapi import status

# Starlette renamed its 422 constant between releases.
HTTP_422_UNPROCESSABLE = 422

__all__ = [
    "CaskNotesError",
    "ValidationError",
    "AuthenticationRequired",
    "Forbidden",
    "PasswordRequired",
    "PasswordMismatch",
    "NotFound",
    "OperationRejected",
    "UpstreamUnavailable",
    "ConfigurationError",
]


class CaskNotesError(Exception):
    """Base class for recoverable domain errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "error"
    default_reason: str = "The request could not be completed."

    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason or self.default_reason
        super().__init__(self.reason)

    def to_payload(self) -> dict[str, object]:
        """Return the JSON body served for this error."""
        return {"detail": self.reason, "code": self.code}


class ValidationError(CaskNotesError):
    """One or more submitted fields are invalid."""

    status_code = HTTP_422_UNPROCESSABLE
    code = "validation_error"
    default_reason = "Please check the submitted fields."

    def __init__(self, field_errors: dict[str, str], reason: str | None = None) -> None:
        super().__init__(reason)
        self.field_errors = dict(field_errors)

    def to_payload(self) -> dict[str, object]:
        payload = super().to_payload()
        payload["field_errors"] = self.field_errors
        return payload


class AuthenticationRequired(CaskNotesError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "authentication_required"
    default_reason = "You need to log in to do this."


class Forbidden(CaskNotesError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_reason = "You can only change your own posts."


class PasswordRequired(CaskNotesError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "password_required"
    default_reason = "Please enter the post password."


class PasswordMismatch(CaskNotesError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "password_mismatch"
    default_reason = "The password does not match."


class NotFound(CaskNotesError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_reason = "Post not found."


class OperationRejected(CaskNotesError):
    """The signed operation boundary refused a tag."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "operation_rejected"
    default_reason = "The operation signature was rejected."


class UpstreamUnavailable(CaskNotesError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "upstream_unavailable"
    default_reason = "The post store is temporarily unavailable."


class ConfigurationError(RuntimeError):
    """Fatal misconfiguration; never translated into a client response."""
