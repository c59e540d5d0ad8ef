from __future__ import annotations

import hashlib
import hmac
import json
import logging

import pytest

from osconsole.core.config import settings
from osconsole.workers import rq_worker


class _Resp:
    status_code = 204

    def raise_for_status(self) -> None:
        return None


@pytest.fixture
def posted(monkeypatch) -> list[dict]:
    calls: list[dict] = []

    def _post(url, data=None, headers=None, timeout=None):
        calls.append({"url": url, "data": data, "headers": headers, "timeout": timeout})
        return _Resp()

    monkeypatch.setattr(rq_worker.requests, "post", _post)
    return calls


def _payload(triggers_email: bool = False) -> dict:
    return {
        "order": {"id": "os-1", "order_number": "OS-0001", "collaborator_email": "joao@padaria.com.br"},
        "from": "diagnosis",
        "to": "ready",
        "triggers_email": triggers_email,
        "actor": {"id": "u-ana", "name": "Ana Técnica"},
    }


def test_status_change_posts_signed_webhook(monkeypatch, posted) -> None:
    monkeypatch.setattr(settings, "webhook_url", "https://hooks.shop.test/os")
    monkeypatch.setattr(settings, "webhook_secret", "topsecret")

    rq_worker.handle_event("os.status_changed", _payload())

    [call] = posted
    assert call["url"] == "https://hooks.shop.test/os"
    assert call["headers"]["X-OS-Console-Event"] == "os.status_changed"
    expected = hmac.new(b"topsecret", call["data"], hashlib.sha256).hexdigest()
    assert call["headers"]["X-OS-Console-Signature"] == f"sha256={expected}"
    assert json.loads(call["data"])["to"] == "ready"


def test_unsigned_without_secret(monkeypatch, posted) -> None:
    monkeypatch.setattr(settings, "webhook_url", "https://hooks.shop.test/os")
    monkeypatch.setattr(settings, "webhook_secret", None)

    rq_worker.handle_event("os.details_updated", {"order": {"id": "os-1"}, "fields": ["reportedProblem"]})

    assert "X-OS-Console-Signature" not in posted[0]["headers"]
    assert posted[0]["headers"]["X-OS-Console-Event"] == "os.details_updated"


def test_no_webhook_url_skips_post(monkeypatch, posted) -> None:
    monkeypatch.setattr(settings, "webhook_url", None)
    rq_worker.handle_event("os.status_changed", _payload())
    assert posted == []


def test_email_status_is_logged(monkeypatch, posted, caplog: pytest.LogCaptureFixture) -> None:
    monkeypatch.setattr(settings, "webhook_url", None)
    with caplog.at_level(logging.INFO, logger="worker.notifications"):
        rq_worker.handle_event("os.status_changed", _payload(triggers_email=True))
    assert any(r.getMessage() == "email_expected" for r in caplog.records)


def test_unknown_event_is_ignored(posted, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="worker.notifications"):
        rq_worker.handle_event("os.deleted", {"id": "os-1"})
    assert posted == []
    assert any(r.getMessage() == "unknown_event" for r in caplog.records)


def test_enqueue_failure_does_not_raise(monkeypatch) -> None:
    from osconsole.services import notifications

    def _broken_queue():
        raise ConnectionError("redis down")

    monkeypatch.setattr(notifications, "_get_queue", _broken_queue)
    assert notifications.enqueue("os.status_changed", {"order": {"id": "os-1"}}) is None
