# osconsole/schemas/statuses.py
from __future__ import annotations

import enum
from typing import Optional

from pydantic import ConfigDict, Field, computed_field, field_validator

from osconsole.schemas.common import CamelModel


class StatusKind(str, enum.Enum):
    initial = "initial"
    intermediate = "intermediate"
    pickup = "pickup"
    final = "final"


class Status(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = Field(..., min_length=1, max_length=255)
    order: int = 0
    color: str = "#64748b"
    icon: Optional[str] = None

    is_initial: bool = False
    is_final: bool = False
    is_pickup_status: bool = False
    triggers_email: bool = False
    email_body: Optional[str] = None

    # куди можна перейти без override-права
    allowed_next_statuses: tuple[str, ...] = ()

    @field_validator(
        "is_initial", "is_final", "is_pickup_status", "triggers_email",
        mode="before",
    )
    @classmethod
    def _none_is_false(cls, v):
        # бекенд віддає null для незаповнених прапорців
        return False if v is None else v

    @field_validator("allowed_next_statuses", mode="before")
    @classmethod
    def _ids_as_str(cls, v):
        if v is None:
            return ()
        return tuple(str(i) for i in v)

    @computed_field
    @property
    def kind(self) -> StatusKind:
        # final сильніший за все інше: з нього переходів немає
        if self.is_final:
            return StatusKind.final
        if self.is_pickup_status:
            return StatusKind.pickup
        if self.is_initial:
            return StatusKind.initial
        return StatusKind.intermediate


class StatusIn(CamelModel):
    """Тіло створення/оновлення статусу (адмінка)."""
    name: str = Field(..., min_length=1, max_length=255)
    order: int = 0
    color: str = "#64748b"
    icon: Optional[str] = None
    is_initial: bool = False
    is_final: bool = False
    is_pickup_status: bool = False
    triggers_email: bool = False
    email_body: Optional[str] = None
    allowed_next_statuses: list[str] = Field(default_factory=list)
