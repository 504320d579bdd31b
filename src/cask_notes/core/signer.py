"""Keyed integrity tags for privileged operations on protected post rows.

The ordinary data path never lets a caller read an anonymous post's credential
hash or mutate another identity's rows. The handful of server-side operations
that must do so carry an HMAC tag computed here; the signed operation gateway
recomputes the tag from its own copy of the secret and refuses on mismatch.
"""
from __future__ import annotations

import hashlib
import hmac
from functools import lru_cache

from cask_notes.core.errors import ConfigurationError
from cask_notes.core.settings import settings

OP_READ_HASH = "read_hash"
OP_ANON_UPDATE = "anon_update"
OP_ANON_DELETE = "anon_delete"
OP_CONVERT = "convert"

MIN_SECRET_LENGTH = 16
PLACEHOLDER_SECRETS = frozenset(
    {
        "changeme",
        "change-me",
        "change_me",
        "secret",
        "placeholder",
        "your-secret-here",
        "your_secret_here",
        "dev-secret",
        "replace-me",
        "operation-signing-secret",
    }
)


def _validate_secret(secret: str | None) -> bytes:
    if secret is None or not secret.strip():
        raise ConfigurationError("OPERATION_SIGNING_SECRET is not configured")
    if secret.strip().lower() in PLACEHOLDER_SECRETS:
        raise ConfigurationError("OPERATION_SIGNING_SECRET is still set to a placeholder value")
    if len(secret) < MIN_SECRET_LENGTH:
        raise ConfigurationError(
            f"OPERATION_SIGNING_SECRET must be at least {MIN_SECRET_LENGTH} characters"
        )
    return secret.encode("utf-8")


def operation_message(subject_id: str, operation: str) -> str:
    """Return the canonical string signed for a single-row operation."""
    return f"{subject_id}:{operation}"


def conversion_message(source_identity: str, destination_identity: str) -> str:
    """Return the canonical string signed for a bulk ownership conversion."""
    return f"{source_identity}:{destination_identity}:{OP_CONVERT}"


class OperationSigner:
    """Produce and check HMAC-SHA256 tags over canonical operation strings."""

    def __init__(self, secret: str | None) -> None:
        self._key = _validate_secret(secret)

    def __repr__(self) -> str:
        return "OperationSigner(<redacted>)"

    def _tag(self, message: str) -> str:
        return hmac.new(self._key, message.encode("utf-8"), hashlib.sha256).hexdigest()

    def sign(self, subject_id: str, operation: str) -> str:
        """Sign ``operation`` against ``subject_id`` (usually a post identifier)."""
        return self._tag(operation_message(str(subject_id), operation))

    def sign_conversion(self, source_identity: str, destination_identity: str) -> str:
        """Sign a bulk conversion from ``source_identity`` to ``destination_identity``."""
        return self._tag(conversion_message(str(source_identity), str(destination_identity)))

    def verify(self, subject_id: str, operation: str, tag: str) -> bool:
        """Return True when ``tag`` matches the expected single-row tag."""
        return hmac.compare_digest(self.sign(subject_id, operation), tag or "")

    def verify_conversion(self, source_identity: str, destination_identity: str, tag: str) -> bool:
        """Return True when ``tag`` matches the expected conversion tag."""
        return hmac.compare_digest(
            self.sign_conversion(source_identity, destination_identity),
            tag or "",
        )


@lru_cache(maxsize=1)
def get_operation_signer() -> OperationSigner:
    """Return the process-wide signer, failing fast on a missing secret."""
    return OperationSigner(settings.operation_signing_secret)
