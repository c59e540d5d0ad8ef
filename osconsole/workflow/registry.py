# osconsole/workflow/registry.py
"""
Реєстр статусів: знімок налаштованих статусів у пам'яті.

Без кешування між перезавантаженнями: refresh() завжди тягне повний список
з бекенду (після будь-якого create/update/delete статусу).
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional, Protocol

from osconsole.schemas.statuses import Status
from osconsole.workflow.errors import ConfigurationError

log = logging.getLogger(__name__)


class StatusSource(Protocol):
    def list_statuses(self) -> list[Status]: ...


class StatusRegistry:
    def __init__(self, statuses: Iterable[Status], source: StatusSource | None = None) -> None:
        self._source = source
        self._replace(statuses)

    @classmethod
    def load(cls, source: StatusSource) -> "StatusRegistry":
        return cls(source.list_statuses(), source=source)

    def refresh(self) -> None:
        if self._source is None:
            raise ConfigurationError("Status registry has no source to refresh from")
        self._replace(self._source.list_statuses())

    def _replace(self, statuses: Iterable[Status]) -> None:
        by_id: dict[str, Status] = {}
        for s in statuses:
            if s.id in by_id:
                raise ConfigurationError(f"Duplicate status id '{s.id}'")
            by_id[s.id] = s
        self._by_id = by_id
        self._ordered = sorted(by_id.values(), key=lambda s: (s.order, s.id))

        dangling = self.dangling_references()
        if dangling:
            log.warning("status_registry_dangling_ids", extra={"dangling": dangling})

    # ---- читання ----

    def list(self) -> list[Status]:
        return list(self._ordered)

    def by_id(self, status_id: str | None) -> Optional[Status]:
        if status_id is None:
            return None
        return self._by_id.get(status_id)

    def __contains__(self, status_id: object) -> bool:
        return status_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def final_status_ids(self) -> frozenset[str]:
        return frozenset(s.id for s in self._ordered if s.is_final)

    def is_final(self, status_id: str | None) -> bool:
        s = self.by_id(status_id)
        return bool(s and s.is_final)

    def initial_status(self) -> Status:
        initial = [s for s in self._ordered if s.is_initial]
        if not initial:
            raise ConfigurationError("No initial status configured")
        if len(initial) > 1:
            ids = ", ".join(s.id for s in initial)
            raise ConfigurationError(f"More than one initial status configured: {ids}")
        return initial[0]

    def config_problems(self, candidate: Status) -> list[str]:
        """
        Перевірка статусу перед збереженням в адмінці.
        candidate.id: id статусу, що редагується ("" для нового).
        """
        problems: list[str] = []
        missing = [i for i in candidate.allowed_next_statuses if i not in self._by_id]
        if missing:
            problems.append(f"Unknown next statuses: {', '.join(missing)}")
        if candidate.id and candidate.id in candidate.allowed_next_statuses:
            problems.append("A status cannot list itself as next")
        if candidate.is_initial:
            others = [s.id for s in self._ordered if s.is_initial and s.id != candidate.id]
            if others:
                problems.append(f"Initial status already set: {', '.join(others)}")
        if candidate.is_initial and candidate.is_final:
            problems.append("A status cannot be both initial and final")
        return problems

    def dangling_references(self) -> dict[str, list[str]]:
        """status id -> ids з allowed_next_statuses, яких немає в реєстрі."""
        out: dict[str, list[str]] = {}
        for s in self._ordered:
            missing = [i for i in s.allowed_next_statuses if i not in self._by_id]
            if missing:
                out[s.id] = missing
        return out
