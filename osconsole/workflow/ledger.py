# osconsole/workflow/ledger.py
"""
Журнал історії OS: переходи статусів (LogEntry) і редагування полів (EditLogEntry).

Лише додавання, у порядку вставки. Записи не редагуються й не видаляються.
Функції повертають нову копію ордера, вхідний ордер не змінюється.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Sequence, TypeVar

from osconsole.schemas.orders import EditLogChange, EditLogEntry, LogEntry, ServiceOrder

T = TypeVar("T")


def append_transition(order: ServiceOrder, entry: LogEntry) -> ServiceOrder:
    return order.model_copy(update={"logs": [*order.logs, entry]})


def append_edit(order: ServiceOrder, entry: EditLogEntry) -> ServiceOrder:
    return order.model_copy(update={"edit_logs": [*order.edit_logs, entry]})


def diff_fields(
    before: Mapping[str, Any],
    after: Mapping[str, Any],
    fields: Iterable[str],
) -> list[EditLogChange]:
    """Зміни по полях у заданому порядку; поля без змін пропускаємо."""
    changes: list[EditLogChange] = []
    for f in fields:
        old, new = before.get(f), after.get(f)
        if _normalize(old) == _normalize(new):
            continue
        changes.append(EditLogChange(field=f, old_value=old, new_value=new))
    return changes


def _normalize(v: Any) -> Any:
    # "" і None для UI однакові ("N/A"); порядок id у списку не важливий
    if v == "":
        return None
    if isinstance(v, (list, tuple)):
        return sorted(str(i) for i in v)
    return v


def most_recent_first(entries: Sequence[T]) -> list[T]:
    """Для показу: новіші зверху. Сам журнал лишається хронологічним."""
    return list(reversed(entries))


def last_entry_into(logs: Sequence[LogEntry], status_ids: Iterable[str]) -> Optional[LogEntry]:
    """Останній перехід, що привів у будь-який із status_ids."""
    targets = set(status_ids)
    for entry in reversed(logs):
        if entry.to_status_id in targets:
            return entry
    return None
