# osconsole/schemas/dashboard.py
from __future__ import annotations

from pydantic import Field

from osconsole.schemas.common import CamelModel


class DashboardSummary(CamelModel):
    active_count: int = 0
    # ключ = status id; усі налаштовані статуси присутні, навіть з 0
    per_status_active_count: dict[str, int] = Field(default_factory=dict)
    per_analyst_created_count: dict[str, int] = Field(default_factory=dict)
    per_analyst_finalized_count: dict[str, int] = Field(default_factory=dict)


class AnalystStat(CamelModel):
    name: str
    count: int


class StatusStat(CamelModel):
    status_id: str
    label: str
    color: str
    icon: str | None = None
    count: int


class DashboardOut(CamelModel):
    summary: DashboardSummary
    # готові до показу зрізи (лише не-фінальні статуси; аналітики за спаданням)
    statuses: list[StatusStat]
    analysts_created: list[AnalystStat]
    analysts_finalized: list[AnalystStat]
