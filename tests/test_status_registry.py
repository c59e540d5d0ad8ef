from __future__ import annotations

import logging

import pytest

from osconsole.schemas.statuses import StatusKind
from osconsole.workflow.errors import ConfigurationError
from osconsole.workflow.registry import StatusRegistry


def test_list_is_sorted_by_order(registry: StatusRegistry) -> None:
    assert [s.id for s in registry.list()] == ["received", "diagnosis", "repair", "ready", "delivered"]


def test_by_id_and_missing(registry: StatusRegistry) -> None:
    assert registry.by_id("repair").name == "Repair"
    assert registry.by_id("nope") is None
    assert registry.by_id(None) is None
    assert "ready" in registry
    assert len(registry) == 5


def test_final_status_ids(registry: StatusRegistry) -> None:
    assert registry.final_status_ids() == frozenset({"delivered"})
    assert registry.is_final("delivered")
    assert not registry.is_final("ready")
    assert not registry.is_final("unknown")


def test_initial_status(registry: StatusRegistry) -> None:
    assert registry.initial_status().id == "received"


def test_initial_status_missing(make_status) -> None:
    reg = StatusRegistry([make_status("a", 1), make_status("b", 2, is_final=True)])
    with pytest.raises(ConfigurationError):
        reg.initial_status()


def test_initial_status_ambiguous(make_status) -> None:
    reg = StatusRegistry([make_status("a", 1, is_initial=True), make_status("b", 2, is_initial=True)])
    with pytest.raises(ConfigurationError) as exc:
        reg.initial_status()
    assert "a, b" in str(exc.value)


def test_duplicate_ids_fail_at_load(make_status) -> None:
    with pytest.raises(ConfigurationError):
        StatusRegistry([make_status("a", 1), make_status("a", 2)])


def test_dangling_ids_are_reported_and_logged(make_status, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="osconsole.workflow.registry"):
        reg = StatusRegistry([make_status("a", 1, is_initial=True, allowed_next_statuses=["ghost", "b"]),
                              make_status("b", 2)])
    assert reg.dangling_references() == {"a": ["ghost"]}
    assert any(r.getMessage() == "status_registry_dangling_ids" for r in caplog.records)


class _Source:
    def __init__(self, batches):
        self.batches = list(batches)
        self.calls = 0

    def list_statuses(self):
        self.calls += 1
        return self.batches.pop(0)


def test_load_and_refresh_do_full_reload(make_status) -> None:
    source = _Source([
        [make_status("a", 1, is_initial=True)],
        [make_status("a", 1, is_initial=True), make_status("z", 0, is_final=True)],
    ])
    reg = StatusRegistry.load(source)
    assert [s.id for s in reg.list()] == ["a"]

    reg.refresh()
    assert source.calls == 2
    assert [s.id for s in reg.list()] == ["z", "a"]


def test_refresh_without_source(registry: StatusRegistry) -> None:
    with pytest.raises(ConfigurationError):
        registry.refresh()


def test_status_kind_tags(registry: StatusRegistry) -> None:
    assert registry.by_id("received").kind is StatusKind.initial
    assert registry.by_id("repair").kind is StatusKind.intermediate
    assert registry.by_id("ready").kind is StatusKind.pickup
    assert registry.by_id("delivered").kind is StatusKind.final


def test_status_accepts_backend_nulls() -> None:
    from osconsole.schemas.statuses import Status

    s = Status.model_validate({
        "id": 7, "name": "Aguardando peça", "order": 3, "color": "#f59e0b",
        "is_final": None, "triggers_email": None, "allowed_next_statuses": None,
    })
    assert s.id == "7"
    assert s.is_final is False
    assert s.allowed_next_statuses == ()


def test_config_problems(registry: StatusRegistry, make_status) -> None:
    ok = make_status("", 6, allowed_next_statuses=["delivered"])
    assert registry.config_problems(ok) == []

    second_initial = make_status("", 6, is_initial=True)
    assert any("Initial status already set" in p for p in registry.config_problems(second_initial))

    # редагування самого початкового статусу не є конфліктом
    same_initial = make_status("received", 1, is_initial=True, allowed_next_statuses=["diagnosis"])
    assert registry.config_problems(same_initial) == []

    bad = make_status("repair", 3, allowed_next_statuses=["repair", "ghost"])
    problems = registry.config_problems(bad)
    assert any("ghost" in p for p in problems)
    assert any("itself" in p for p in problems)
