# tests/test_errors.py
"""Tests for the error payloads served by the API."""

import warnings

from cask_notes.core.errors import (
    HTTP_422_UNPROCESSABLE,
    PasswordMismatch,
    ValidationError,
)


def test_validation_error_is_unprocessable() -> None:
    """Field errors travel with a 422 status and a stable code."""
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        error = ValidationError({"title": "Please enter a title."})
        status_code = error.status_code
        payload = error.to_payload()

    assert status_code == HTTP_422_UNPROCESSABLE == 422
    assert payload["code"] == "validation_error"
    assert payload["field_errors"] == {"title": "Please enter a title."}


def test_reason_defaults_per_error() -> None:
    assert PasswordMismatch().reason == PasswordMismatch.default_reason
    assert PasswordMismatch("nope").to_payload()["detail"] == "nope"
