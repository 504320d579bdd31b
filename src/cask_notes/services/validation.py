"""Field-level validation for post and account input.

Validators collect every problem into a ``{field: reason}`` mapping rather
than stopping at the first one.
"""
from __future__ import annotations

import math
import re
from collections.abc import Iterable

from cask_notes.core.passwords import MIN_EDIT_PASSWORD_LENGTH
from cask_notes.schemas.post import TastingInput
from cask_notes.services.sanitizer import plain_text_from_html, sanitize_plain_text

DEFAULT_MAX_TAGS = 10
MAX_TAG_LENGTH = 30
NICKNAME_MIN_LENGTH = 2
NICKNAME_MAX_LENGTH = 20
MIN_ACCOUNT_PASSWORD_LENGTH = 6
COLOR_MIN, COLOR_MAX = 0.0, 1.0
RATING_MIN, RATING_MAX = 0.0, 5.0
HALF_STEP_TOLERANCE = 1e-6

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def parse_tags(value: Iterable[str] | str | None, limit: int = DEFAULT_MAX_TAGS) -> list[str]:
    """Normalize tags: split comma lists, drop ``#`` prefixes, dedupe, bound the count."""
    if value is None:
        return []
    raw = value.split(",") if isinstance(value, str) else list(value)

    tags: list[str] = []
    seen: set[str] = set()
    for item in raw:
        tag = sanitize_plain_text(str(item)).strip().lstrip("#").strip()
        if not tag:
            continue
        tag = tag[:MAX_TAG_LENGTH]
        key = tag.lower()
        if key in seen:
            continue
        seen.add(key)
        tags.append(tag)
        if len(tags) >= limit:
            break
    return tags


def normalize_author_name(author_name: str | None, default: str) -> str:
    """Return a trimmed, markup-free author name or ``default`` when blank."""
    trimmed = sanitize_plain_text(author_name)
    return trimmed if trimmed else default


def validate_post_fields(title: str | None, sanitized_content: str | None) -> dict[str, str]:
    """Check that title and content carry visible text."""
    errors: dict[str, str] = {}
    if not title or not title.strip():
        errors["title"] = "Please enter a title."
    if not plain_text_from_html(sanitized_content):
        errors["content"] = "Please enter some content."
    return errors


def validate_edit_password(password: str | None, confirm: str | None) -> dict[str, str]:
    """Check the anonymous edit password policy.

    ``confirm`` is only compared when the client sent one.
    """
    errors: dict[str, str] = {}
    if not password or len(password) < MIN_EDIT_PASSWORD_LENGTH:
        errors["edit_password"] = (
            f"The password must be at least {MIN_EDIT_PASSWORD_LENGTH} characters."
        )
    if confirm is not None and password and confirm != password:
        errors["edit_password_confirm"] = "The password confirmation does not match."
    return errors


def validate_registration(
    email: str | None,
    nickname: str | None,
    password: str | None,
    password_confirm: str | None,
) -> dict[str, str]:
    """Check sign-up input."""
    errors: dict[str, str] = {}
    email = (email or "").strip()
    nickname = (nickname or "").strip()

    if not email:
        errors["email"] = "Please enter your email."
    elif not _EMAIL_RE.match(email):
        errors["email"] = "Please enter a valid email address."

    if not NICKNAME_MIN_LENGTH <= len(nickname) <= NICKNAME_MAX_LENGTH:
        errors["nickname"] = (
            f"Nicknames must be {NICKNAME_MIN_LENGTH} to {NICKNAME_MAX_LENGTH} characters."
        )

    if not password or len(password) < MIN_ACCOUNT_PASSWORD_LENGTH:
        errors["password"] = (
            f"The password must be at least {MIN_ACCOUNT_PASSWORD_LENGTH} characters."
        )
    elif password != password_confirm:
        errors["password_confirm"] = "The password confirmation does not match."
    return errors


_RATING_LABELS = {"nose": "Nose", "palate": "Palate", "finish": "Finish"}


def _missing(value: float | None) -> bool:
    return value is None or math.isnan(value)


def _is_half_step(value: float) -> bool:
    scaled = value * 2
    return abs(scaled - round(scaled)) < HALF_STEP_TOLERANCE


def validate_tasting_input(tasting: TastingInput) -> dict[str, str]:
    """Check a tasting record: color 0.00-1.00, ratings 0-5 in half steps."""
    errors: dict[str, str] = {}
    if _missing(tasting.color):
        errors["color"] = "Please enter a color value."
    elif not COLOR_MIN <= tasting.color <= COLOR_MAX:
        errors["color"] = "The color value must be between 0.00 and 1.00."

    for field, label in _RATING_LABELS.items():
        value = getattr(tasting, field)
        if _missing(value):
            errors[field] = f"Please enter a {label.lower()} rating."
        elif not RATING_MIN <= value <= RATING_MAX or not _is_half_step(value):
            errors[field] = f"{label} ratings go from 0 to 5 in steps of 0.5."
    return errors
