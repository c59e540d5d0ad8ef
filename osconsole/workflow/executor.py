# osconsole/workflow/executor.py
"""
Виконавець переходів: єдина точка, через яку змінюється статус OS.

Перевірки (у цьому порядку):
  1. право os:update                      -> PermissionDenied
  2. поточний статус фінальний            -> OrderFinalized
  3. той самий статус                     -> оновлення деталей, без LogEntry
     (порожня нотатка очищує рішення, але не в pickup-статусі)
  4. ціль не серед available_targets      -> InvalidTarget
  5. pickup-статус і порожня нотатка      -> MissingRequiredNote
  6. статус шле email, а не всі послуги
     підтверджені                         -> IncompleteServiceConfirmation

Працюємо на копіях: при будь-якій помилці вхідний ордер не змінюється.
Якщо передано store, обчислений результат зберігається через нього, і
повертається те, що віддав store.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, Literal, Optional, Protocol

from osconsole.schemas.orders import EditLogEntry, LogEntry, ServiceOrder
from osconsole.schemas.statuses import Status, StatusKind
from osconsole.workflow import ledger
from osconsole.workflow.authorizer import available_targets
from osconsole.workflow.errors import (
    ConfigurationError,
    IncompleteServiceConfirmation,
    InvalidTarget,
    MissingRequiredNote,
    OrderFinalized,
    PermissionDenied,
)
from osconsole.workflow.permissions import Action, Actor, Resource
from osconsole.workflow.registry import StatusRegistry

log = logging.getLogger(__name__)

# імена полів, як їх показує історія редагувань в UI
DETAIL_FIELDS = ("technicalSolution", "confirmedServiceIds")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderStore(Protocol):
    def persist_transition(self, before: ServiceOrder, after: ServiceOrder, entry: LogEntry) -> ServiceOrder: ...

    def persist_details(self, before: ServiceOrder, after: ServiceOrder,
                        entry: Optional[EditLogEntry]) -> ServiceOrder: ...


@dataclass(frozen=True)
class TransitionResult:
    order: ServiceOrder
    kind: Literal["transition", "details"]
    previous_status_id: str
    status: Status
    log_entry: Optional[LogEntry] = None
    edit_entry: Optional[EditLogEntry] = None

    @property
    def status_changed(self) -> bool:
        return self.kind == "transition"


class TransitionExecutor:
    def __init__(
        self,
        registry: StatusRegistry,
        store: OrderStore | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.registry = registry
        self.store = store
        self.clock = clock

    def execute(
        self,
        order: ServiceOrder,
        target_status_id: str,
        note: str | None,
        confirmed_service_ids: Iterable[str],
        actor: Actor,
    ) -> TransitionResult:
        if not actor.can(Resource.os, Action.update):
            raise PermissionDenied("Not allowed to update service orders")

        current = self.registry.by_id(order.status_id)
        if current is None:
            raise ConfigurationError(f"Service order {order.id} has unknown status '{order.status_id}'")
        if current.is_final:
            raise OrderFinalized()

        note_clean = (note or "").strip()
        confirmed = self._confirmed_subset(order, confirmed_service_ids)

        if target_status_id == current.id:
            return self._update_details(order, current, note_clean, confirmed, actor)

        targets = {s.id: s for s in available_targets(current, actor.has_override, self.registry)}
        target = targets.get(target_status_id)
        if target is None:
            raise InvalidTarget(target_status_id)

        if target.is_pickup_status and not note_clean:
            raise MissingRequiredNote()

        if target.triggers_email:
            missing = [sid for sid in order.contracted_service_ids() if sid not in confirmed]
            if missing:
                raise IncompleteServiceConfirmation(missing)

        now = self.clock()
        entry = LogEntry(
            timestamp=now,
            responsible=actor.identity,
            from_status_id=current.id,
            to_status_id=target.id,
            observation=note_clean or None,
        )
        update: dict = {
            "status_id": target.id,
            "confirmed_service_ids": confirmed,
            "updated_at": now,
        }
        if note_clean:
            update["technical_solution"] = note_clean
        updated = ledger.append_transition(order.model_copy(update=update), entry)

        if self.store is not None:
            updated = self.store.persist_transition(order, updated, entry)

        log.info(
            "status_changed",
            extra={"os_id": order.id, "from": current.id, "to": target.id, "responsible": actor.identity},
        )
        return TransitionResult(
            order=updated,
            kind="transition",
            previous_status_id=current.id,
            status=target,
            log_entry=entry,
        )

    def _update_details(
        self,
        order: ServiceOrder,
        current: Status,
        note_clean: str,
        confirmed: list[str],
        actor: Actor,
    ) -> TransitionResult:
        # повторний вибір поточного статусу: лише рішення й підтверджені послуги.
        # Порожня нотатка очищує рішення, крім pickup-статусу, де воно обов'язкове.
        solution = note_clean or None
        if solution is None and current.kind is StatusKind.pickup:
            solution = order.technical_solution
        before = {
            "technicalSolution": order.technical_solution,
            "confirmedServiceIds": list(order.confirmed_service_ids),
        }
        after = {
            "technicalSolution": solution,
            "confirmedServiceIds": confirmed,
        }
        changes = ledger.diff_fields(before, after, DETAIL_FIELDS)

        entry: Optional[EditLogEntry] = None
        updated = order
        if changes:
            now = self.clock()
            entry = EditLogEntry(timestamp=now, responsible=actor.identity, changes=tuple(changes))
            updated = ledger.append_edit(
                order.model_copy(update={
                    "technical_solution": solution,
                    "confirmed_service_ids": confirmed,
                    "updated_at": now,
                }),
                entry,
            )

        if self.store is not None:
            updated = self.store.persist_details(order, updated, entry)

        log.info(
            "details_updated",
            extra={"os_id": order.id, "status": current.id, "changed": [c.field for c in changes]},
        )
        return TransitionResult(
            order=updated,
            kind="details",
            previous_status_id=current.id,
            status=current,
            edit_entry=entry,
        )

    @staticmethod
    def _confirmed_subset(order: ServiceOrder, confirmed_service_ids: Iterable[str]) -> list[str]:
        # confirmed ⊆ contracted; порядок як у контракті, без дублікатів
        submitted = {str(i) for i in confirmed_service_ids or []}
        return [sid for sid in order.contracted_service_ids() if sid in submitted]
