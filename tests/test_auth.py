"""Loading of the token signing key."""
from __future__ import annotations

import pytest

from social_graph.security.secrets import MissingSecretError, require_secret


@pytest.mark.parametrize("value", ["", "   ", "changeme", "short-key"])
def test_require_secret_rejects_unusable_values(monkeypatch, value):
    monkeypatch.setenv("SIGNING_KEY_UNDER_TEST", value)
    with pytest.raises(MissingSecretError) as excinfo:
        require_secret("SIGNING_KEY_UNDER_TEST")
    assert "SIGNING_KEY_UNDER_TEST" in str(excinfo.value)
    if value.strip():
        assert value not in str(excinfo.value)


def test_require_secret_trims_value(monkeypatch):
    monkeypatch.setenv("SIGNING_KEY_UNDER_TEST", "  a-long-enough-signing-key \n")
    assert require_secret("SIGNING_KEY_UNDER_TEST") == "a-long-enough-signing-key"
