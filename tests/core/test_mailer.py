from __future__ import annotations

import io
import json
from urllib.error import HTTPError, URLError

import pytest

from macscan_core.config import Config
from macscan_core.errors import DeliveryError
from macscan_core.mailer import (
    EmailMessage,
    LogEmailSender,
    ResendEmailSender,
    build_sender,
)
from macscan_core.mailer import senders


class _FakeResponse:
    def __init__(self, status: int, body: bytes) -> None:
        self.status = status
        self._body = body

    def read(self) -> bytes:
        return self._body

    def getcode(self) -> int:
        return self.status

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


def _message() -> EmailMessage:
    return EmailMessage(
        to="pat@example.com",
        subject="Your Mac health report: Good",
        text="plain body",
        html="<p>html body</p>",
        sender="Scanner <scanner@example.com>",
    )


def _config(**overrides) -> Config:
    values = dict(
        env="test",
        log_level="INFO",
        email_backend="log",
        resend_api_key=None,
        resend_api_url="https://mail.example.test/emails",
        email_from="Scanner <scanner@example.com>",
        advisor_email="advisor@example.com",
        email_timeout_s=5.0,
        business_name="Acme Mac Care",
    )
    values.update(overrides)
    return Config(**values)


@pytest.mark.core
def test_resend_sender_posts_message(monkeypatch):
    captured = {}

    def fake_urlopen(request, timeout):
        captured["request"] = request
        captured["timeout"] = timeout
        return _FakeResponse(200, b'{"id": "msg-123"}')

    monkeypatch.setattr(senders, "urlopen", fake_urlopen)
    sender = ResendEmailSender(
        api_key="re_test", api_url="https://mail.example.test/emails", timeout_s=5.0
    )
    result = sender.send(_message())

    request = captured["request"]
    assert captured["timeout"] == 5.0
    assert request.get_method() == "POST"
    assert request.full_url == "https://mail.example.test/emails"
    assert request.get_header("Authorization") == "Bearer re_test"
    body = json.loads(request.data.decode("utf-8"))
    assert body == {
        "from": "Scanner <scanner@example.com>",
        "to": ["pat@example.com"],
        "subject": "Your Mac health report: Good",
        "text": "plain body",
        "html": "<p>html body</p>",
    }
    assert result.backend == "resend"
    assert result.status == "sent"
    assert result.message_id == "msg-123"
    assert result.status_code == 200


@pytest.mark.core
def test_resend_sender_tolerates_empty_body(monkeypatch):
    monkeypatch.setattr(senders, "urlopen", lambda request, timeout: _FakeResponse(202, b""))
    sender = ResendEmailSender(api_key="k", api_url="https://mail.example.test", timeout_s=1)
    result = sender.send(_message())
    assert result.message_id is None
    assert result.status_code == 202


@pytest.mark.core
def test_resend_sender_http_error(monkeypatch):
    def fake_urlopen(request, timeout):
        raise HTTPError(
            request.full_url, 422, "Unprocessable Entity", {}, io.BytesIO(b"{}")
        )

    monkeypatch.setattr(senders, "urlopen", fake_urlopen)
    sender = ResendEmailSender(api_key="k", api_url="https://mail.example.test", timeout_s=1)
    with pytest.raises(DeliveryError) as excinfo:
        sender.send(_message())
    assert excinfo.value.status_code == 422
    assert "HTTP 422" in str(excinfo.value)


@pytest.mark.core
def test_resend_sender_network_error(monkeypatch):
    def fake_urlopen(request, timeout):
        raise URLError("connection refused")

    monkeypatch.setattr(senders, "urlopen", fake_urlopen)
    sender = ResendEmailSender(api_key="k", api_url="https://mail.example.test", timeout_s=1)
    with pytest.raises(DeliveryError) as excinfo:
        sender.send(_message())
    assert excinfo.value.status_code is None
    assert "unreachable" in str(excinfo.value)


@pytest.mark.core
def test_resend_sender_rejects_non_success_status(monkeypatch):
    monkeypatch.setattr(
        senders, "urlopen", lambda request, timeout: _FakeResponse(302, b"")
    )
    sender = ResendEmailSender(api_key="k", api_url="https://mail.example.test", timeout_s=1)
    with pytest.raises(DeliveryError):
        sender.send(_message())


@pytest.mark.core
def test_log_sender_never_touches_network(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("network used")

    monkeypatch.setattr(senders, "urlopen", fail)
    result = LogEmailSender().send(_message())
    assert result.backend == "log"
    assert result.status == "logged"
    assert result.message_id


@pytest.mark.core
def test_build_sender_by_backend():
    assert isinstance(build_sender(_config()), LogEmailSender)
    sender = build_sender(_config(email_backend="resend", resend_api_key="re_live"))
    assert isinstance(sender, ResendEmailSender)
    assert sender.api_key == "re_live"
    assert sender.timeout_s == 5.0


@pytest.mark.core
def test_build_sender_requires_key_for_resend():
    with pytest.raises(ValueError):
        build_sender(_config(email_backend="resend"))
