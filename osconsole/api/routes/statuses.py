# osconsole/api/routes/statuses.py
from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from ..deps import BackendDep, RegistryDep, require
from osconsole.schemas.statuses import Status, StatusIn
from osconsole.workflow.permissions import Action, Actor, Resource
from osconsole.workflow.registry import StatusRegistry

router = APIRouter()
log = logging.getLogger(__name__)


def _check(registry: StatusRegistry, payload: StatusIn, status_id: str = "") -> None:
    candidate = Status(id=status_id, **payload.model_dump())
    problems = registry.config_problems(candidate)
    if problems:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=problems)


@router.get("", response_model=list[Status])
def list_statuses(registry: RegistryDep, _: Annotated[Actor, Depends(require(Resource.os, Action.read))]):
    # упорядковано за `order`
    return registry.list()


# Мутації повертають увесь перезавантажений список: UI одразу перемальовує таблицю.

@router.post("", response_model=list[Status], status_code=status.HTTP_201_CREATED)
def create_status(
    payload: StatusIn,
    client: BackendDep,
    registry: RegistryDep,
    current: Annotated[Actor, Depends(require(Resource.admin_status, Action.create))],
):
    _check(registry, payload)
    created = client.create_status(payload)
    log.info("status_created", extra={"status_id": created.id, "by": current.identity})
    registry.refresh()
    return registry.list()


@router.put("/{status_id}", response_model=list[Status])
def update_status(
    status_id: str,
    payload: StatusIn,
    client: BackendDep,
    registry: RegistryDep,
    current: Annotated[Actor, Depends(require(Resource.admin_status, Action.update))],
):
    if status_id not in registry:
        raise HTTPException(status_code=404, detail="Status not found")
    _check(registry, payload, status_id)
    client.update_status(status_id, payload)
    log.info("status_updated", extra={"status_id": status_id, "by": current.identity})
    registry.refresh()
    return registry.list()


@router.delete("/{status_id}", response_model=list[Status])
def delete_status(
    status_id: str,
    client: BackendDep,
    registry: RegistryDep,
    current: Annotated[Actor, Depends(require(Resource.admin_status, Action.delete))],
):
    if status_id not in registry:
        raise HTTPException(status_code=404, detail="Status not found")
    referenced_by = [s.id for s in registry.list() if status_id in s.allowed_next_statuses]
    if referenced_by:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Status is still listed as next by: {', '.join(referenced_by)}",
        )
    client.delete_status(status_id)
    log.info("status_deleted", extra={"status_id": status_id, "by": current.identity})
    registry.refresh()
    return registry.list()
