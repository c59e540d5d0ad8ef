from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

import pytest

from osconsole.schemas.orders import LogEntry, ProvidedService, ServiceOrder
from osconsole.schemas.statuses import Status
from osconsole.workflow.permissions import Actor
from osconsole.workflow.registry import StatusRegistry

FIXED_NOW = datetime(2024, 5, 17, 14, 30, tzinfo=timezone.utc)


def _status(status_id: str, order: int, **kwargs: Any) -> Status:
    return Status(id=status_id, name=(status_id or "new").title(), order=order, **kwargs)


@pytest.fixture
def make_status() -> Callable[..., Status]:
    return _status


@pytest.fixture
def shop_statuses() -> list[Status]:
    # received -> diagnosis -> repair -> ready (pickup, email) -> delivered (final)
    return [
        _status("delivered", 5, is_final=True),
        _status("ready", 4, is_pickup_status=True, triggers_email=True,
                allowed_next_statuses=["delivered"]),
        _status("repair", 3, allowed_next_statuses=["ready", "diagnosis"]),
        _status("diagnosis", 2, allowed_next_statuses=["repair", "ready"]),
        _status("received", 1, is_initial=True, allowed_next_statuses=["diagnosis"]),
    ]


@pytest.fixture
def registry(shop_statuses: list[Status]) -> StatusRegistry:
    return StatusRegistry(shop_statuses)


@pytest.fixture
def operator() -> Actor:
    return Actor.from_role(
        "Ana Técnica",
        {"os": ["create", "read", "update"], "dashboard": ["read"], "clients": ["read"]},
        user_id="u-ana",
    )


@pytest.fixture
def admin() -> Actor:
    return Actor.from_role(
        "Bruno Admin",
        {"os": ["all"], "dashboard": ["read"], "adminSettings": ["all"], "adminStatus": ["all"]},
        user_id="u-bruno",
    )


@pytest.fixture
def viewer() -> Actor:
    return Actor.from_role("Carla Leitura", {"os": ["read"]}, user_id="u-carla")


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


def _order(
    status_id: str = "received",
    *,
    order_id: str = "os-1",
    contracted: tuple[str, ...] = ("svc-backup", "svc-edr"),
    confirmed: tuple[str, ...] = (),
    analyst: str | None = "Ana Técnica",
    logs: list[LogEntry] | None = None,
    technical_solution: str | None = None,
) -> ServiceOrder:
    return ServiceOrder(
        id=order_id,
        order_number=f"OS-{order_id.upper()}",
        client_id="cli-1",
        client_snapshot={"name": "Padaria Central", "email": "contato@padaria.com.br", "cnpj": "12.345.678/0001-90"},
        collaborator={"name": "João", "email": "joao@padaria.com.br", "phone": "11 99999-0000"},
        equipment={"type": "Notebook", "brand": "Dell", "model": "Latitude 5420", "serial_number": "SN123"},
        reported_problem="Não liga após queda de energia",
        analyst=analyst,
        status_id=status_id,
        technical_solution=technical_solution,
        contracted_services=[ProvidedService(id=s, name=s.removeprefix("svc-").upper()) for s in contracted],
        confirmed_service_ids=list(confirmed),
        created_at=datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc),
        updated_at=datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc),
        logs=logs or [],
    )


@pytest.fixture
def make_order() -> Callable[..., ServiceOrder]:
    return _order


@pytest.fixture
def make_log() -> Callable[..., LogEntry]:
    def _log(from_id: str, to_id: str, responsible: str = "Ana Técnica", observation: str | None = None,
             ts: datetime = FIXED_NOW) -> LogEntry:
        return LogEntry(timestamp=ts, responsible=responsible, from_status_id=from_id,
                        to_status_id=to_id, observation=observation)

    return _log
