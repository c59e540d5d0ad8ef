# osconsole/workflow/editor.py
"""
Редагування не-статусних полів OS (клієнт, контакт, обладнання, проблема).

Кожне редагування з реальними змінами додає один EditLogEntry з різницею
по полях. Статус тут не змінюється ніколи, для цього є TransitionExecutor.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from osconsole.schemas.orders import EditLogEntry, OrderDetailsUpdate, ServiceOrder
from osconsole.workflow import ledger
from osconsole.workflow.errors import ConfigurationError, OrderFinalized, PermissionDenied
from osconsole.workflow.executor import OrderStore, utcnow
from osconsole.workflow.permissions import Action, Actor, Resource
from osconsole.workflow.registry import StatusRegistry

log = logging.getLogger(__name__)

# плоскі імена полів (так їх перекладає історія редагувань в UI)
EDITABLE_FIELDS = (
    "clientId",
    "collaboratorName",
    "collaboratorEmail",
    "collaboratorPhone",
    "equipmentType",
    "equipmentBrand",
    "equipmentModel",
    "equipmentSerialNumber",
    "reportedProblem",
)


def flatten(order: ServiceOrder) -> dict[str, Any]:
    return {
        "clientId": order.client_id,
        "collaboratorName": order.collaborator.name,
        "collaboratorEmail": order.collaborator.email,
        "collaboratorPhone": order.collaborator.phone,
        "equipmentType": order.equipment.type,
        "equipmentBrand": order.equipment.brand,
        "equipmentModel": order.equipment.model,
        "equipmentSerialNumber": order.equipment.serial_number,
        "reportedProblem": order.reported_problem,
    }


def apply_update(order: ServiceOrder, payload: OrderDetailsUpdate) -> ServiceOrder:
    update: dict[str, Any] = {}
    if payload.client_id is not None:
        update["client_id"] = payload.client_id
    # вкладені об'єкти часткові: зливаємо лише передані під-поля
    if payload.collaborator is not None:
        update["collaborator"] = order.collaborator.model_copy(
            update=payload.collaborator.model_dump(exclude_unset=True),
        )
    if payload.equipment is not None:
        update["equipment"] = order.equipment.model_copy(
            update=payload.equipment.model_dump(exclude_unset=True),
        )
    if payload.reported_problem is not None:
        update["reported_problem"] = payload.reported_problem
    return order.model_copy(update=update)


@dataclass(frozen=True)
class EditResult:
    order: ServiceOrder
    entry: Optional[EditLogEntry] = None

    @property
    def changed(self) -> bool:
        return self.entry is not None


class DetailEditor:
    def __init__(
        self,
        registry: StatusRegistry,
        store: OrderStore | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.registry = registry
        self.store = store
        self.clock = clock

    def edit(self, order: ServiceOrder, payload: OrderDetailsUpdate, actor: Actor) -> EditResult:
        if not actor.can(Resource.os, Action.update):
            raise PermissionDenied("Not allowed to update service orders")
        if order.status_id not in self.registry:
            raise ConfigurationError(f"Service order {order.id} has unknown status '{order.status_id}'")
        if self.registry.is_final(order.status_id):
            raise OrderFinalized()

        candidate = apply_update(order, payload)
        changes = ledger.diff_fields(flatten(order), flatten(candidate), EDITABLE_FIELDS)
        if not changes:
            return EditResult(order=order)

        now = self.clock()
        observation = (payload.observation or "").strip() or None
        entry = EditLogEntry(
            timestamp=now,
            responsible=actor.identity,
            changes=tuple(changes),
            observation=observation,
        )
        updated = ledger.append_edit(candidate.model_copy(update={"updated_at": now}), entry)

        if self.store is not None:
            updated = self.store.persist_details(order, updated, entry)

        log.info("details_edited", extra={"os_id": order.id, "changed": [c.field for c in changes]})
        return EditResult(order=updated, entry=entry)
