# osconsole/schemas/orders.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import ConfigDict, Field, field_validator

from osconsole.schemas.common import CamelModel


class ProvidedService(CamelModel):
    id: str
    name: str
    description: Optional[str] = None


class ClientSnapshot(CamelModel):
    # знімок клієнта на момент створення OS, з клієнтом не синхронізується
    name: str = ""
    email: Optional[str] = None
    cnpj: Optional[str] = None
    address: Optional[str] = None


class Collaborator(CamelModel):
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None


class Equipment(CamelModel):
    type: str = ""
    brand: str = ""
    model: str = ""
    serial_number: str = ""


# ==== Історія (append-only, записи незмінні) ====


class LogEntry(CamelModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    responsible: str
    from_status_id: str
    to_status_id: str
    observation: Optional[str] = None


class EditLogChange(CamelModel):
    model_config = ConfigDict(frozen=True)

    field: str
    old_value: Any = None
    new_value: Any = None


class EditLogEntry(CamelModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    responsible: str
    changes: tuple[EditLogChange, ...] = ()
    observation: Optional[str] = None


# ==== Ордер ====


class ServiceOrder(CamelModel):
    id: str
    order_number: str
    client_id: str
    client_snapshot: ClientSnapshot = Field(default_factory=ClientSnapshot)
    collaborator: Collaborator = Field(default_factory=Collaborator)
    equipment: Equipment = Field(default_factory=Equipment)
    reported_problem: str = ""
    analyst: Optional[str] = None

    status_id: str
    technical_solution: Optional[str] = None

    contracted_services: list[ProvidedService] = Field(default_factory=list)
    confirmed_service_ids: list[str] = Field(default_factory=list)
    attachments: list[str] = Field(default_factory=list)

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    logs: list[LogEntry] = Field(default_factory=list)
    edit_logs: list[EditLogEntry] = Field(default_factory=list)

    @field_validator(
        "contracted_services", "confirmed_service_ids", "attachments",
        "logs", "edit_logs",
        mode="before",
    )
    @classmethod
    def _none_is_empty(cls, v):
        return [] if v is None else v

    @field_validator("confirmed_service_ids", mode="before")
    @classmethod
    def _ids_as_str(cls, v):
        return [str(i) for i in (v or [])]

    def contracted_service_ids(self) -> list[str]:
        return [s.id for s in self.contracted_services]


# ==== Тіла запитів консолі ====


class TransitionIn(CamelModel):
    new_status_id: str
    note: str = ""
    confirmed_service_ids: list[str] = Field(default_factory=list)


class OrderDetailsUpdate(CamelModel):
    # усі поля опційні; статус тут змінити не можна (extra -> 422)
    model_config = ConfigDict(extra="forbid")

    client_id: Optional[str] = None
    collaborator: Optional[Collaborator] = None
    equipment: Optional[Equipment] = None
    reported_problem: Optional[str] = Field(default=None, min_length=10)
    observation: Optional[str] = Field(default=None, max_length=2000)


class OrderCreate(CamelModel):
    client_id: str
    collaborator: Collaborator
    equipment: Equipment
    reported_problem: str = Field(..., min_length=10)


class OrderHistoryOut(CamelModel):
    # для показу: новіші записи зверху
    logs: list[LogEntry] = Field(default_factory=list)
    edit_logs: list[EditLogEntry] = Field(default_factory=list)


class Client(CamelModel):
    id: str
    name: str
    email: Optional[str] = None
    cnpj: Optional[str] = None
    address: Optional[str] = None
    contracted_service_ids: list[str] = Field(default_factory=list)

    @field_validator("contracted_service_ids", mode="before")
    @classmethod
    def _ids_as_str(cls, v):
        return [str(i) for i in (v or [])]
