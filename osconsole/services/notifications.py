# osconsole/services/notifications.py
import logging
from typing import Any, Mapping

import redis
from rq import Queue, Retry

from osconsole.core.config import settings
from osconsole.schemas.orders import ServiceOrder
from osconsole.workflow.executor import TransitionResult
from osconsole.workflow.permissions import Actor

log = logging.getLogger(__name__)

_queue: Queue | None = None


def _get_queue() -> Queue:
    global _queue
    if _queue is None:
        _queue = Queue(settings.notifications_queue, connection=redis.from_url(settings.redis_url))
    return _queue


def _order_payload(order: ServiceOrder) -> dict[str, Any]:
    return {
        "id": order.id,
        "order_number": order.order_number,
        "status_id": order.status_id,
        "client_name": order.client_snapshot.name,
        "client_email": order.client_snapshot.email,
        "collaborator_email": order.collaborator.email,
        "analyst": order.analyst,
    }


def _actor_payload(actor: Actor) -> dict[str, Any]:
    return {"id": actor.user_id, "name": actor.identity}


def notify_status_changed(result: TransitionResult, actor: Actor) -> str | None:
    return enqueue("os.status_changed", {
        "order": _order_payload(result.order),
        "from": result.previous_status_id,
        "to": result.status.id,
        "status_name": result.status.name,
        # сам лист відправляє бекенд; тут лише прапорець для вебхука/логів
        "triggers_email": result.status.triggers_email,
        "observation": result.log_entry.observation if result.log_entry else None,
        "actor": _actor_payload(actor),
    })


def notify_details_updated(order: ServiceOrder, fields: list[str], actor: Actor) -> str | None:
    return enqueue("os.details_updated", {
        "order": _order_payload(order),
        "fields": list(fields),
        "actor": _actor_payload(actor),
    })


def enqueue(event_type: str, payload: Mapping[str, Any]) -> str | None:
    """
    Кладемо подію в чергу: воркер викликає handle_event.
    Повертає job.id або None у разі помилки (щоб не валити HTTP-запит:
    перехід уже збережено в бекенді).
    """
    try:
        job = _get_queue().enqueue(
            "osconsole.workers.rq_worker.handle_event",
            event_type,
            dict(payload),
            job_timeout=60,
            retry=Retry(max=3, interval=[5, 15, 30]),
        )
        return getattr(job, "id", None)
    except Exception as e:
        log.exception("Failed to enqueue event '%s': %s", event_type, e)
        return None
