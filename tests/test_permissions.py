from __future__ import annotations

import pytest

from osconsole.workflow.permissions import (
    OVERRIDE_TRANSITIONS,
    Action,
    Actor,
    Permission,
    Resource,
    parse_permissions,
)


def test_all_expands_to_every_action() -> None:
    perms = parse_permissions({"clients": ["all"]})
    assert perms == {Permission(Resource.clients, a) for a in Action}


def test_unknown_keys_are_ignored() -> None:
    perms = parse_permissions({"reports": ["read"], "os": ["read", "export"]})
    assert perms == {Permission(Resource.os, Action.read)}


@pytest.mark.parametrize("raw", [None, {}, {"os": None}])
def test_empty_roles(raw) -> None:
    assert parse_permissions(raw) == frozenset()


def test_override_comes_from_admin_settings_update(operator: Actor, admin: Actor) -> None:
    assert OVERRIDE_TRANSITIONS == Permission(Resource.admin_settings, Action.update)
    assert not operator.has_override
    assert admin.has_override
    assert Actor.from_role("Só leitura", {"adminSettings": ["read"]}).has_override is False


def test_can(operator: Actor, viewer: Actor) -> None:
    assert operator.can(Resource.os, Action.update)
    assert not operator.can(Resource.os, Action.delete)
    assert viewer.can(Resource.os, Action.read)
    assert not viewer.can(Resource.dashboard, Action.read)
