from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from osconsole.schemas.orders import Collaborator, Equipment, OrderDetailsUpdate
from osconsole.workflow import ledger
from osconsole.workflow.editor import DetailEditor
from osconsole.workflow.errors import OrderFinalized, PermissionDenied


def test_append_transition_keeps_insertion_order(make_order, make_log) -> None:
    first = make_log("received", "diagnosis")
    order = make_order("diagnosis", logs=[first])
    second = make_log("diagnosis", "repair")

    updated = ledger.append_transition(order, second)
    assert updated.logs == [first, second]
    assert order.logs == [first]


def test_log_entries_are_immutable(make_log) -> None:
    entry = make_log("received", "diagnosis")
    with pytest.raises(ValidationError):
        entry.observation = "змінено"


def test_diff_fields_skips_equal_values() -> None:
    before = {"a": "x", "b": None, "c": ["1", "2"], "d": 1}
    after = {"a": "x", "b": "", "c": ["2", "1"], "d": 2}
    changes = ledger.diff_fields(before, after, ["a", "b", "c", "d"])
    assert [(c.field, c.old_value, c.new_value) for c in changes] == [("d", 1, 2)]


def test_diff_fields_follows_requested_order() -> None:
    changes = ledger.diff_fields({"x": 1, "y": 1}, {"x": 2, "y": 2}, ["y", "x"])
    assert [c.field for c in changes] == ["y", "x"]


def test_most_recent_first_does_not_mutate(make_log, clock) -> None:
    entries = [make_log("a", "b", ts=clock()), make_log("b", "c", ts=clock() + timedelta(hours=1))]
    shown = ledger.most_recent_first(entries)
    assert [e.to_status_id for e in shown] == ["c", "b"]
    assert [e.to_status_id for e in entries] == ["b", "c"]


def test_last_entry_into_scans_from_the_end(make_log) -> None:
    logs = [
        make_log("a", "final", responsible="X"),
        make_log("final", "b", responsible="Admin"),
        make_log("b", "final", responsible="Y"),
        make_log("final", "c", responsible="Admin"),
    ]
    found = ledger.last_entry_into(logs, {"final"})
    assert found is logs[2]
    assert found.responsible == "Y"
    assert ledger.last_entry_into(logs, {"nowhere"}) is None
    assert ledger.last_entry_into([], {"final"}) is None


# ==== Редагування деталей ====


@pytest.fixture
def editor(registry, clock) -> DetailEditor:
    return DetailEditor(registry, clock=clock)


def test_edit_records_changed_fields(editor, make_order, operator) -> None:
    order = make_order("repair")
    payload = OrderDetailsUpdate(
        collaborator=Collaborator(name="João", email="joao@padaria.com.br", phone="11 98888-1111"),
        equipment=Equipment(type="Notebook", brand="Dell", model="Latitude 5420", serial_number="SN999"),
        observation="  cliente trocou de número  ",
    )
    result = editor.edit(order, payload, operator)

    assert result.changed
    assert [c.field for c in result.entry.changes] == ["collaboratorPhone", "equipmentSerialNumber"]
    assert result.entry.changes[1].old_value == "SN123"
    assert result.entry.changes[1].new_value == "SN999"
    assert result.entry.observation == "cliente trocou de número"
    assert result.entry.responsible == "Ana Técnica"
    assert result.order.edit_logs == [result.entry]
    assert result.order.equipment.serial_number == "SN999"
    # статус і журнал переходів не чіпаємо
    assert result.order.status_id == "repair"
    assert result.order.logs == order.logs


def test_edit_without_changes_adds_nothing(editor, make_order, operator) -> None:
    order = make_order("repair")
    result = editor.edit(order, OrderDetailsUpdate(client_id="cli-1"), operator)
    assert not result.changed
    assert result.order is order


def test_edit_refused_for_finalized_order(editor, make_order, admin) -> None:
    with pytest.raises(OrderFinalized):
        editor.edit(make_order("delivered"), OrderDetailsUpdate(client_id="cli-2"), admin)


def test_edit_requires_update_permission(editor, make_order, viewer) -> None:
    with pytest.raises(PermissionDenied):
        editor.edit(make_order("repair"), OrderDetailsUpdate(client_id="cli-2"), viewer)


def test_reported_problem_too_short() -> None:
    with pytest.raises(ValidationError):
        OrderDetailsUpdate(reported_problem="curto")


def test_partial_nested_edit_keeps_other_subfields(editor, make_order, operator) -> None:
    order = make_order("repair")
    payload = OrderDetailsUpdate.model_validate({
        "collaborator": {"phone": "11 98888-7777"},
        "equipment": {"serialNumber": "SN-NEW"},
    })
    result = editor.edit(order, payload, operator)

    assert [(c.field, c.old_value, c.new_value) for c in result.entry.changes] == [
        ("collaboratorPhone", "11 99999-0000", "11 98888-7777"),
        ("equipmentSerialNumber", "SN123", "SN-NEW"),
    ]
    assert result.order.collaborator.name == "João"
    assert result.order.collaborator.email == "joao@padaria.com.br"
    assert result.order.equipment.brand == "Dell"
    assert result.order.equipment.model == "Latitude 5420"
