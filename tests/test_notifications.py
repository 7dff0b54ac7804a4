"""Tests for the password reset email task."""
from __future__ import annotations

from unittest.mock import MagicMock, patch

import httpx
import pytest

from benglish.config import settings
from benglish.tasks import notifications


@pytest.fixture()
def relay_settings(monkeypatch):
    monkeypatch.setattr(settings, "EMAIL_RELAY_URL", "https://relay.example.com/send")
    monkeypatch.setattr(settings, "EMAIL_RELAY_TOKEN", "relay-secret")
    yield settings


def _client_returning(response: httpx.Response) -> MagicMock:
    client = MagicMock()
    client.__enter__.return_value = client
    client.post.return_value = response
    return client


def test_reset_links_escape_token() -> None:
    app_link, web_link = notifications.build_reset_links("a+b/c")

    assert app_link == f"{settings.APP_RESET_LINK_BASE}?token=a%2Bb%2Fc"
    assert web_link == f"{settings.WEB_RESET_LINK_BASE}?token=a%2Bb%2Fc"


def test_send_password_reset_email_posts_to_relay(relay_settings) -> None:
    client = _client_returning(httpx.Response(202))

    with patch("benglish.tasks.notifications.httpx.Client", return_value=client):
        result = notifications.send_password_reset_email.apply(args=("learner@example.com", "tok")).get()

    assert result == {"status": "sent"}
    _, kwargs = client.post.call_args
    assert kwargs["json"]["to"] == "learner@example.com"
    assert "token=tok" in kwargs["json"]["html"]
    assert kwargs["headers"] == {"x-internal-token": "relay-secret"}


def test_relay_rejection_raises(relay_settings) -> None:
    client = _client_returning(httpx.Response(400, text="bad recipient"))

    with patch("benglish.tasks.notifications.httpx.Client", return_value=client):
        with pytest.raises(notifications.EmailRelayError) as excinfo:
            notifications.relay_email(to="x@example.com", subject="s", text="t", html="h")

    assert excinfo.value.status_code == 400
    assert not notifications.is_transient(excinfo.value)


def test_missing_relay_url_drops_email(monkeypatch) -> None:
    monkeypatch.setattr(settings, "EMAIL_RELAY_URL", None)

    with patch("benglish.tasks.notifications.httpx.Client") as client_cls:
        notifications.relay_email(to="x@example.com", subject="s", text="t", html="h")

    client_cls.assert_not_called()


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (notifications.EmailRelayError("busy", status_code=503), True),
        (notifications.EmailRelayError("greylisted", status_code=451), True),
        (notifications.EmailRelayError("status=503 in a 400 body", status_code=400), False),
        (notifications.EmailRelayError("no status"), False),
        (httpx.ConnectError("refused"), True),
    ],
)
def test_transient_relay_failures(error: Exception, expected: bool) -> None:
    assert notifications.is_transient(error) is expected
