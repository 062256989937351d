# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the log redaction processor."""

from schoolhub.utils.logging import redact_secrets


class TestRedactSecrets:
    """Tests for redact_secrets."""

    def test_masks_credentials(self) -> None:
        event = {"event": "login_failed", "password": "hunter2", "otp": "123456"}

        redacted = redact_secrets(None, "info", event)

        assert redacted["password"] == "***"
        assert redacted["otp"] == "***"
        assert redacted["event"] == "login_failed"

    def test_truncates_session_id(self) -> None:
        event = {"event": "logged_out", "session_id": "0b6f6c1e-1234-4abc-9def-001122334455"}

        assert redact_secrets(None, "info", event)["session_id"] == "0b6f6c1e..."

    def test_short_session_id_is_masked(self) -> None:
        assert redact_secrets(None, "info", {"session_id": "abc"})["session_id"] == "***"

    def test_leaves_other_keys(self) -> None:
        event = {"event": "login_succeeded", "user_id": "u-1", "tenant_id": "riverside.example"}

        assert redact_secrets(None, "info", dict(event)) == event
