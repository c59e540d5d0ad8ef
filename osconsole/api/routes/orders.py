# osconsole/api/routes/orders.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Query, Request, status

from ..deps import ActorDep, BackendDep, RegistryDep
from osconsole.core.logging import log_extra
from osconsole.schemas.orders import (
    OrderCreate,
    OrderDetailsUpdate,
    OrderHistoryOut,
    ServiceOrder,
    TransitionIn,
)
from osconsole.schemas.statuses import Status
from osconsole.services import orders as svc

router = APIRouter()
log = logging.getLogger(__name__)


@router.get("", response_model=list[ServiceOrder])
def list_orders(
    client: BackendDep,
    registry: RegistryDep,
    current: ActorDep,
    search: str | None = Query(default=None, max_length=255),
    include_finalized: bool = Query(default=False, alias="includeFinalized"),
):
    return svc.list_orders(client, registry, current, search=search, include_finalized=include_finalized)


@router.post("", response_model=ServiceOrder, status_code=status.HTTP_201_CREATED)
def create_order(payload: OrderCreate, client: BackendDep, registry: RegistryDep, current: ActorDep):
    return svc.create_order(client, registry, current, payload)


@router.get("/{order_id}", response_model=ServiceOrder)
def get_order(order_id: str, client: BackendDep, current: ActorDep):
    return svc.get_order(client, current, order_id)


@router.get("/{order_id}/targets", response_model=list[Status])
def list_targets(order_id: str, client: BackendDep, registry: RegistryDep, current: ActorDep):
    """Статуси, доступні поточному користувачу з поточного статусу OS (за `order`)."""
    return svc.targets_for(client, registry, current, order_id)


@router.get("/{order_id}/history", response_model=OrderHistoryOut)
def get_history(order_id: str, client: BackendDep, current: ActorDep):
    """Журнал переходів і редагувань, новіші зверху."""
    return svc.history(client, current, order_id)


@router.put("/{order_id}/status", response_model=ServiceOrder)
def change_status(order_id: str, payload: TransitionIn, request: Request, client: BackendDep,
                  registry: RegistryDep, current: ActorDep):
    """
    Зміна статусу (або, якщо обрано поточний статус, лише рішення/послуги).
    Усі перевірки робить TransitionExecutor; помилки мапить обробник у main.py.
    """
    result = svc.change_status(client, registry, current, order_id, payload)
    log.info(
        "os_status_request_done",
        extra={**log_extra(request), "os_id": order_id, "kind": result.kind},
    )
    return result.order


@router.put("/{order_id}", response_model=ServiceOrder)
def edit_order(order_id: str, payload: OrderDetailsUpdate, client: BackendDep, registry: RegistryDep,
               current: ActorDep):
    return svc.edit_details(client, registry, current, order_id, payload).order
