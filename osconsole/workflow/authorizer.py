# osconsole/workflow/authorizer.py
"""
Які статуси доступні з поточного.

Звичайний оператор ходить по налаштованому графу (allowed_next_statuses),
адмін з override-правом може поставити будь-який інший статус, щоб
розблокувати застряглу OS. З фінального статусу переходів немає ні для кого.
"""
from __future__ import annotations

from typing import Optional

from osconsole.schemas.orders import ServiceOrder
from osconsole.schemas.statuses import Status
from osconsole.workflow.permissions import Actor
from osconsole.workflow.registry import StatusRegistry


def available_targets(
    current: Optional[Status],
    actor_has_override: bool,
    registry: StatusRegistry,
) -> list[Status]:
    if current is None or current.is_final:
        return []

    candidates: dict[str, Status] = {}
    if actor_has_override:
        for s in registry.list():
            if s.id != current.id:
                candidates[s.id] = s
    else:
        for status_id in current.allowed_next_statuses:
            s = registry.by_id(status_id)
            # id, яких немає в реєстрі, мовчки відкидаємо
            if s is not None:
                candidates[s.id] = s

    return sorted(candidates.values(), key=lambda s: (s.order, s.id))


def available_targets_for(order: ServiceOrder, actor: Actor, registry: StatusRegistry) -> list[Status]:
    return available_targets(registry.by_id(order.status_id), actor.has_override, registry)
