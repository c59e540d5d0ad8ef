# osconsole/workers/rq_worker.py
import os
import logging
import json
import hmac, hashlib
from typing import Any, Callable, Mapping

import redis
import requests
from rq import Queue, Worker

from osconsole.core.config import settings
from osconsole.core.logging import setup_logging

logger = logging.getLogger("worker.notifications")

def _sign(payload: Mapping[str, Any]) -> str | None:
    if not settings.webhook_secret:
        return None
    body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    return hmac.new(settings.webhook_secret.encode("utf-8"), body, hashlib.sha256).hexdigest()

def _post(url: str, event_type: str, payload: Mapping[str, Any]) -> None:
    if not url:
        logger.debug("webhook_url_missing", extra={"event_type": event_type})
        return
    headers = {"Content-Type": "application/json", "X-OS-Console-Event": event_type}
    sig = _sign(payload)
    if sig:
        headers["X-OS-Console-Signature"] = f"sha256={sig}"
    # тіло серіалізуємо самі, щоб підпис рахувався по тих самих байтах
    body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    r = requests.post(url, data=body, headers=headers, timeout=10)
    # помилка вебхука -> виняток -> RQ повторить job за Retry-політикою
    r.raise_for_status()
    logger.info("webhook_sent", extra={"event_type": event_type, "status": r.status_code})

def on_status_changed(payload: Mapping[str, Any]) -> None:
    order = payload.get("order", {})
    logger.info("status_changed", extra={
        "os_id": order.get("id"),
        "from": payload.get("from"),
        "to": payload.get("to"),
        "triggers_email": bool(payload.get("triggers_email")),
    })
    if payload.get("triggers_email"):
        # лист шле бекенд; фіксуємо, кому він мав піти
        logger.info("email_expected", extra={
            "os_id": order.get("id"),
            "to_email": order.get("collaborator_email") or order.get("client_email"),
        })
    _post(settings.webhook_url or "", "os.status_changed", payload)

def on_details_updated(payload: Mapping[str, Any]) -> None:
    order = payload.get("order", {})
    logger.info("details_updated", extra={"os_id": order.get("id"), "fields": payload.get("fields")})
    _post(settings.webhook_url or "", "os.details_updated", payload)

EVENT_HANDLERS: dict[str, Callable[[Mapping[str, Any]], None]] = {
    "os.status_changed": on_status_changed,
    "os.details_updated": on_details_updated,
}

def handle_event(event_type: str, payload: Mapping[str, Any] | None = None) -> None:
    handler = EVENT_HANDLERS.get(event_type)
    if not handler:
        logger.warning("unknown_event", extra={"event_type": event_type})
        return
    handler(payload or {})

def main() -> None:
    setup_logging(settings.log_level)
    logger.info("worker_starting", extra={"queue": settings.notifications_queue, "redis": settings.redis_url})
    conn = redis.from_url(settings.redis_url)
    queue = Queue(settings.notifications_queue, connection=conn)
    worker = Worker([queue], connection=conn, name=os.getenv("WORKER_NAME", "notifications-worker"))
    worker.work(logging_level=settings.log_level)

if __name__ == "__main__":
    main()
