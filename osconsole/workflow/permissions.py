# osconsole/workflow/permissions.py
"""
Права доступу: закритий перелік пар ресурс × дія.

Бекенд віддає роль як {"os": ["read", "update"], "adminSettings": ["all"]}.
Тут ця мапа один раз розбирається у frozenset[Permission]; далі всі перевірки
йдуть по множині, без рядкових ключів.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, NamedTuple

log = logging.getLogger(__name__)


class Resource(str, enum.Enum):
    dashboard = "dashboard"
    os = "os"
    clients = "clients"
    admin_users = "adminUsers"
    admin_roles = "adminRoles"
    admin_services = "adminServices"
    admin_status = "adminStatus"
    admin_settings = "adminSettings"


class Action(str, enum.Enum):
    create = "create"
    read = "read"
    update = "update"
    delete = "delete"


ALL_ACTIONS = "all"


class Permission(NamedTuple):
    resource: Resource
    action: Action


# Override: адмін може перевести OS у будь-який статус
OVERRIDE_TRANSITIONS = Permission(Resource.admin_settings, Action.update)
UPDATE_ORDERS = Permission(Resource.os, Action.update)


def parse_permissions(raw: Mapping[str, Iterable[str]] | None) -> frozenset[Permission]:
    """
    Перетворює мапу ролі у множину прав.
    Невідомі ресурси/дії ігноруємо (роль могли налаштувати новішим UI).
    """
    granted: set[Permission] = set()
    for resource_key, actions in (raw or {}).items():
        try:
            resource = Resource(resource_key)
        except ValueError:
            log.debug("unknown_permission_resource", extra={"resource": resource_key})
            continue
        for action_key in actions or []:
            if action_key == ALL_ACTIONS:
                granted.update(Permission(resource, a) for a in Action)
                continue
            try:
                granted.add(Permission(resource, Action(action_key)))
            except ValueError:
                log.debug(
                    "unknown_permission_action",
                    extra={"resource": resource_key, "action": action_key},
                )
    return frozenset(granted)


@dataclass(frozen=True)
class Actor:
    """Хто діє: ім'я для журналу + набір прав."""

    identity: str
    permissions: frozenset[Permission] = field(default_factory=frozenset)
    user_id: str | None = None

    def can(self, resource: Resource, action: Action) -> bool:
        return Permission(resource, action) in self.permissions

    @property
    def has_override(self) -> bool:
        return OVERRIDE_TRANSITIONS in self.permissions

    @classmethod
    def from_role(cls, identity: str, raw_permissions: Mapping[str, Iterable[str]] | None,
                  *, user_id: str | None = None) -> "Actor":
        return cls(identity=identity, permissions=parse_permissions(raw_permissions), user_id=user_id)
