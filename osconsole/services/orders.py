# osconsole/services/orders.py
"""
Orders service: склеює workflow-ядро з бекендом.

Роутери викликають ці функції, щоб не дублювати логіку: завантажити
ордер, прогнати перехід через TransitionExecutor, зберегти, поставити
нотифікацію в чергу.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable

from osconsole.clients.backend import BackendClient, BackendOrderStore
from osconsole.schemas.orders import (
    OrderCreate,
    OrderDetailsUpdate,
    OrderHistoryOut,
    ServiceOrder,
    TransitionIn,
)
from osconsole.schemas.statuses import Status
from osconsole.services import notifications
from osconsole.workflow import ledger
from osconsole.workflow.authorizer import available_targets_for
from osconsole.workflow.editor import DetailEditor, EditResult
from osconsole.workflow.errors import PermissionDenied
from osconsole.workflow.executor import TransitionExecutor, TransitionResult
from osconsole.workflow.permissions import Action, Actor, Resource
from osconsole.workflow.registry import StatusRegistry

log = logging.getLogger(__name__)


def _require(actor: Actor, resource: Resource, action: Action) -> None:
    if not actor.can(resource, action):
        raise PermissionDenied()


# ---- читання ----

def _matches(order: ServiceOrder, term: str, status_name: str) -> bool:
    haystack = (
        order.order_number,
        order.client_snapshot.name,
        order.equipment.type,
        order.equipment.brand,
        order.equipment.model,
        order.equipment.serial_number,
        order.analyst,
        status_name,
    )
    return any(term in (v or "").lower() for v in haystack)


def filter_orders(
    orders: Iterable[ServiceOrder],
    registry: StatusRegistry,
    search: str | None = None,
    include_finalized: bool = False,
) -> list[ServiceOrder]:
    """Пошук без урахування регістру; фінальні OS приховані, якщо не просили."""
    term = (search or "").strip().lower()
    final_ids = registry.final_status_ids()
    out: list[ServiceOrder] = []
    for o in orders:
        if not include_finalized and o.status_id in final_ids:
            continue
        status = registry.by_id(o.status_id)
        if term and not _matches(o, term, status.name if status else ""):
            continue
        out.append(o)
    return out


def list_orders(client: BackendClient, registry: StatusRegistry, actor: Actor, *,
                search: str | None = None, include_finalized: bool = False) -> list[ServiceOrder]:
    _require(actor, Resource.os, Action.read)
    return filter_orders(client.list_orders(), registry, search, include_finalized)


def get_order(client: BackendClient, actor: Actor, order_id: str) -> ServiceOrder:
    _require(actor, Resource.os, Action.read)
    return client.get_order(order_id)


def targets_for(client: BackendClient, registry: StatusRegistry, actor: Actor,
                order_id: str) -> list[Status]:
    order = get_order(client, actor, order_id)
    return available_targets_for(order, actor, registry)


def history(client: BackendClient, actor: Actor, order_id: str) -> OrderHistoryOut:
    order = get_order(client, actor, order_id)
    return OrderHistoryOut(
        logs=ledger.most_recent_first(order.logs),
        edit_logs=ledger.most_recent_first(order.edit_logs),
    )


# ---- створення ----

def build_new_order(
    payload: OrderCreate,
    registry: StatusRegistry,
    actor: Actor,
    client_record: Any,
    provided_services: Iterable[Any] = (),
) -> dict[str, Any]:
    """
    Тіло POST /os: початковий статус з реєстру + знімок клієнта.
    Знімок навмисно не синхронізується з клієнтом надалі.
    """
    _require(actor, Resource.os, Action.create)
    initial = registry.initial_status()
    contracted_ids = set(getattr(client_record, "contracted_service_ids", []) or [])
    contracted = [
        s.model_dump() for s in provided_services if s.id in contracted_ids
    ]
    return {
        "client_id": payload.client_id,
        "client_snapshot": {
            "name": client_record.name,
            "email": client_record.email,
            "cnpj": client_record.cnpj,
            "address": client_record.address,
        },
        "collaborator": payload.collaborator.model_dump(),
        "equipment": payload.equipment.model_dump(),
        "reported_problem": payload.reported_problem,
        "analyst": actor.identity,
        "status_id": initial.id,
        "contracted_services": contracted,
        "confirmed_service_ids": [],
    }


def create_order(client: BackendClient, registry: StatusRegistry, actor: Actor,
                 payload: OrderCreate) -> ServiceOrder:
    client_record = client.get_client(payload.client_id)
    services = client.list_services() if client_record.contracted_service_ids else []
    body = build_new_order(payload, registry, actor, client_record, services)
    order = client.create_order(body)
    log.info("os_created", extra={"os_id": order.id, "status": body["status_id"], "analyst": actor.identity})
    return order


# ---- зміни ----

def change_status(client: BackendClient, registry: StatusRegistry, actor: Actor,
                  order_id: str, payload: TransitionIn) -> TransitionResult:
    order = client.get_order(order_id)
    executor = TransitionExecutor(registry, store=BackendOrderStore(client))
    result = executor.execute(
        order,
        payload.new_status_id,
        payload.note,
        payload.confirmed_service_ids,
        actor,
    )
    if result.status_changed:
        notifications.notify_status_changed(result, actor)
    elif result.edit_entry is not None:
        notifications.notify_details_updated(
            result.order, [c.field for c in result.edit_entry.changes], actor,
        )
    return result


def edit_details(client: BackendClient, registry: StatusRegistry, actor: Actor,
                 order_id: str, payload: OrderDetailsUpdate) -> EditResult:
    order = client.get_order(order_id)
    result = DetailEditor(registry, store=BackendOrderStore(client)).edit(order, payload, actor)
    if result.entry is not None:
        notifications.notify_details_updated(
            result.order, [c.field for c in result.entry.changes], actor,
        )
    return result
