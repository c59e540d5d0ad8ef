from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from osconsole.clients.backend import BackendClient
from osconsole.core.config import settings
from osconsole.workflow.permissions import Action, Actor, Resource
from osconsole.workflow.registry import StatusRegistry

# OAuth2 bearer (для інтеграції з /api/docs).
# Логін живе в бекенді, консоль лише прокидає токен далі.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.backend_url}/auth/login")


def get_backend(
    request: Request,
    token: Annotated[str, Depends(oauth2_scheme)],
) -> BackendClient:
    """Клієнт бекенду з токеном і X-Request-ID поточного запиту."""
    return BackendClient(token, request_id=getattr(request.state, "request_id", None))


BackendDep = Annotated[BackendClient, Depends(get_backend)]


def get_actor(client: BackendDep) -> Actor:
    """
    Хто робить запит: /auth/me + права ролі.
    Якщо бекенд не вклав роль у /auth/me, дотягуємо /roles/{role_id}.
    Без ролі: порожній набір прав (усе заборонено).
    """
    me = client.get_me()
    role = me.role
    if role is None and me.role_id:
        role = client.get_role(me.role_id)
    return Actor.from_role(
        me.name or me.email,
        role.permissions if role is not None else {},
        user_id=me.id,
    )


ActorDep = Annotated[Actor, Depends(get_actor)]


def get_registry(client: BackendDep) -> StatusRegistry:
    # свіжий знімок на кожен запит, без кешу між запитами
    return StatusRegistry.load(client)


RegistryDep = Annotated[StatusRegistry, Depends(get_registry)]


def require(resource: Resource, action: Action):
    """
    Пускає лише тих, у кого є право resource:action.
    Приклад: @router.post(..., dependencies=[Depends(require(Resource.admin_status, Action.create))])
    """

    def _guard(actor: ActorDep) -> Actor:
        if not actor.can(resource, action):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return actor

    return _guard
