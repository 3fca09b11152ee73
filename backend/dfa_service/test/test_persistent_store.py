import sqlite3
import time
from unittest.mock import MagicMock, patch

import pytest
from dfa_engine.errors import DFANotFoundError, DFAOwnershipError
from dfa_engine.identity import UserIdentity
from dfa_engine.records import DFARecord
from dfa_engine.store import DFAStore

ALICE = UserIdentity(uid="alice-uid", email="alice@example.com")
BOB = UserIdentity(uid="bob-uid")


def make_record(name):
    return DFARecord(
        name=name,
        states=["q0"],
        alphabet=["a"],
        initial_state="q0",
        accept_states=["q0"],
        transition_table={"q0": {"a": "q0"}},
        test_strings=["aa"],
    )


@pytest.fixture
def store(tmp_path):
    return DFAStore(str(tmp_path / "nested" / "dfas.db"))


def test_create_and_get(store):
    dfa_id = store.create(ALICE, make_record("first"))
    stored = store.get(dfa_id, ALICE.uid)
    assert stored.id == dfa_id
    assert stored.user_id == "alice-uid"
    assert stored.created_by == "alice@example.com"
    assert stored.record == make_record("first")

def test_list_is_newest_first_and_per_user(store):
    first = store.create(ALICE, make_record("first"))
    time.sleep(0.01)
    second = store.create(ALICE, make_record("second"))
    store.create(BOB, make_record("bob's"))

    listed = store.list_for_user(ALICE.uid)
    assert [s.id for s in listed] == [second, first]
    assert [s.record.name for s in store.list_for_user(BOB.uid)] == ["bob's"]
    assert store.list_for_user("nobody") == []

def test_delete(store):
    dfa_id = store.create(ALICE, make_record("gone"))
    store.delete(dfa_id, ALICE.uid)
    assert store.count(ALICE.uid) == 0
    with pytest.raises(DFANotFoundError):
        store.get(dfa_id, ALICE.uid)

def test_other_users_cannot_read_or_delete(store):
    dfa_id = store.create(ALICE, make_record("private"))
    with pytest.raises(DFAOwnershipError):
        store.get(dfa_id, BOB.uid)
    with pytest.raises(DFAOwnershipError):
        store.delete(dfa_id, BOB.uid)
    assert store.count() == 1

def test_missing_id(store):
    with pytest.raises(DFANotFoundError) as exc_info:
        store.delete("does-not-exist", ALICE.uid)
    assert str(exc_info.value) == "DFA not found"

def test_data_survives_reopen(tmp_path):
    path = str(tmp_path / "dfas.db")
    dfa_id = DFAStore(path).create(ALICE, make_record("kept"))
    assert DFAStore(path).get(dfa_id, ALICE.uid).record.name == "kept"

def test_stored_to_dict_has_record_fields(store):
    dfa_id = store.create(ALICE, make_record("flat"))
    data = store.get(dfa_id, ALICE.uid).to_dict()
    assert data["id"] == dfa_id
    assert data["userId"] == "alice-uid"
    assert data["initialState"] == "q0"
    assert data["transitionTable"] == {"q0": {"a": "q0"}}

@pytest.mark.parametrize("operation", [
    lambda s: s.create(ALICE, make_record("first")),
    lambda s: s.list_for_user(ALICE.uid),
    lambda s: s.count(),
    lambda s: s.get("missing", ALICE.uid),
    lambda s: s.delete("missing", ALICE.uid),
], ids=["create", "list_for_user", "count", "get", "delete"])
def test_connection_closed_when_query_fails(store, operation):
    conn = MagicMock()
    conn.cursor.return_value.execute.side_effect = sqlite3.OperationalError("disk I/O error")
    with patch.object(store, "_connect", return_value=conn):
        with pytest.raises(sqlite3.OperationalError):
            operation(store)
    conn.close.assert_called_once()
