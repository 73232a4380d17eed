"""Tests for the JSON proposal store."""

from datetime import date

import pytest
from pydantic import ValidationError

from backend.app.errors import ProposalAccessDenied, ProposalNotFound
from backend.app.models import ProposalCreate, ProposalUpdate, ViewControls
from backend.app.projector import project
from backend.app.storage import ProposalStore


def _body(**kwargs):
    data = {
        "client_name": "Construtora Silva & Cia",
        "sent_date": date(2025, 2, 15),
        "value": 85000,
        "last_follow_up": date(2025, 2, 20),
    }
    data.update(kwargs)
    return ProposalCreate(**data)


def test_create_assigns_id_and_timestamps(store):
    p = store.create("alice", _body())
    assert p.id
    assert p.owner_id == "alice"
    assert p.status == "pending"
    assert p.created_at == p.updated_at
    assert store.get("alice", p.id) == p


def test_created_record_shows_up_once_in_unfiltered_view(store):
    store.create("alice", _body(client_name="Other"))
    p = store.create("alice", _body())
    result = project(store.list("alice"), ViewControls(page_size=100))
    assert [x.id for x in result.visible_page].count(p.id) == 1


def test_records_persist_across_store_instances(tmp_path):
    p = ProposalStore(tmp_path).create("alice", _body(expected_return_date=date(2025, 3, 1)))
    again = ProposalStore(tmp_path).get("alice", p.id)
    assert again.expected_return_date == date(2025, 3, 1)
    assert again.sent_date == date(2025, 2, 15)


def test_list_is_owner_scoped_newest_first(store):
    a1 = store.create("alice", _body(client_name="A1"))
    store.create("bob", _body(client_name="B1"))
    a2 = store.create("alice", _body(client_name="A2"))
    assert [p.id for p in store.list("alice")] == [a2.id, a1.id]


def test_update_is_partial_and_refreshes_updated_at(store):
    p = store.create("alice", _body())
    updated = store.update("alice", p.id, ProposalUpdate(status="approved", notes="ok"))
    assert updated.status == "approved"
    assert updated.notes == "ok"
    assert updated.client_name == p.client_name
    assert updated.id == p.id
    assert updated.updated_at >= p.updated_at
    assert updated.created_at == p.created_at


def test_update_can_clear_return_date(store):
    p = store.create("alice", _body(expected_return_date=date(2025, 3, 1)))
    updated = store.update("alice", p.id, ProposalUpdate(expected_return_date=None))
    assert updated.expected_return_date is None


def test_other_owner_is_rejected(store):
    p = store.create("alice", _body())
    with pytest.raises(ProposalAccessDenied):
        store.get("bob", p.id)
    with pytest.raises(ProposalAccessDenied):
        store.update("bob", p.id, ProposalUpdate(notes="x"))
    with pytest.raises(ProposalAccessDenied):
        store.delete("bob", p.id)
    assert store.get("alice", p.id).notes == ""


def test_unknown_id(store):
    with pytest.raises(ProposalNotFound):
        store.get("alice", "missing")
    with pytest.raises(ProposalNotFound):
        store.delete("alice", "missing")


def test_delete(store):
    p = store.create("alice", _body())
    store.delete("alice", p.id)
    assert store.list("alice") == []


def test_bulk_status_is_all_or_nothing(store):
    a = store.create("alice", _body())
    b = store.create("alice", _body())
    foreign = store.create("bob", _body())

    with pytest.raises(ProposalAccessDenied):
        store.bulk_update_status("alice", [a.id, foreign.id], "rejected")
    assert store.get("alice", a.id).status == "pending"

    out = store.bulk_update_status("alice", [a.id, b.id], "rejected")
    assert [p.status for p in out] == ["rejected", "rejected"]
    assert {p.status for p in store.list("alice")} == {"rejected"}


def test_validation_happens_before_the_store():
    with pytest.raises(ValidationError):
        _body(client_name="   ")
    with pytest.raises(ValidationError):
        _body(value=-1)
    with pytest.raises(ValidationError):
        _body(status="archived")
    with pytest.raises(ValidationError):
        ProposalUpdate(value=-5)
