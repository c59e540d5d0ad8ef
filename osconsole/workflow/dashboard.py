# osconsole/workflow/dashboard.py
"""
Агрегати для дашборду (без збереження snapshot).

Рахується повністю при кожному завантаженні: O(ордери × записи журналу),
для обсягів однієї майстерні цього достатньо.
"""
from __future__ import annotations

from typing import Iterable, Mapping

from osconsole.schemas.dashboard import AnalystStat, DashboardSummary, StatusStat
from osconsole.schemas.orders import ServiceOrder
from osconsole.schemas.statuses import StatusKind
from osconsole.workflow.ledger import last_entry_into
from osconsole.workflow.registry import StatusRegistry

UNASSIGNED = "unassigned"


def summarize(
    all_orders: Iterable[ServiceOrder],
    registry: StatusRegistry,
    unassigned_label: str = UNASSIGNED,
) -> DashboardSummary:
    final_ids = registry.final_status_ids()

    # кожен налаштований статус присутній, навіть якщо 0
    per_status: dict[str, int] = {s.id: 0 for s in registry.list()}
    created: dict[str, int] = {}
    finalized: dict[str, int] = {}
    active = 0

    for order in all_orders:
        analyst = order.analyst or unassigned_label
        created[analyst] = created.get(analyst, 0) + 1

        if order.status_id not in final_ids:
            active += 1
            per_status[order.status_id] = per_status.get(order.status_id, 0) + 1
            continue

        # хто закрив: останній перехід у фінальний статус (не обов'язково останній запис)
        closing = last_entry_into(order.logs, final_ids)
        if closing is not None:
            who = closing.responsible or unassigned_label
            finalized[who] = finalized.get(who, 0) + 1

    return DashboardSummary(
        active_count=active,
        per_status_active_count=per_status,
        per_analyst_created_count=created,
        per_analyst_finalized_count=finalized,
    )


def ranked(counts: Mapping[str, int]) -> list[AnalystStat]:
    """За спаданням кількості; при рівності за ім'ям."""
    return [
        AnalystStat(name=k, count=v)
        for k, v in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    ]


def status_stats(summary: DashboardSummary, registry: StatusRegistry) -> list[StatusStat]:
    """Картки по активних (не фінальних) статусах, у порядку статусів."""
    return [
        StatusStat(
            status_id=s.id,
            label=s.name,
            color=s.color,
            icon=s.icon,
            count=summary.per_status_active_count.get(s.id, 0),
        )
        for s in registry.list()
        if s.kind is not StatusKind.final
    ]
