# osconsole/api/routes/settings.py
from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from ..deps import BackendDep, require
from osconsole.schemas.settings import PASSWORD_MASK, EmailSettings
from osconsole.workflow.permissions import Action, Actor, Resource

router = APIRouter()
log = logging.getLogger(__name__)


@router.get("/email", response_model=EmailSettings)
def get_email_settings(
    client: BackendDep,
    _: Annotated[Actor, Depends(require(Resource.admin_settings, Action.read))],
):
    # пароль SMTP назовні не віддаємо
    return client.get_email_settings().masked()


@router.put("/email", response_model=EmailSettings)
def update_email_settings(
    payload: EmailSettings,
    client: BackendDep,
    current: Annotated[Actor, Depends(require(Resource.admin_settings, Action.update))],
):
    if payload.smtp_password in (None, "", PASSWORD_MASK):
        # маска/порожнє = "не змінювати пароль"
        payload = payload.model_copy(update={"smtp_password": None})
    saved = client.update_email_settings(payload)
    log.info("email_settings_updated", extra={"by": current.identity})
    return saved.masked()
