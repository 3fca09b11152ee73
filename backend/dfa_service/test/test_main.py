import json

import pytest
from dfa_engine.config import Settings
from dfa_engine.errors import AuthenticationError, RecordIncompleteError
from dfa_engine.identity import UserIdentity, resolve_identity
from dfa_engine.records import DFARecord
from dfa_engine.store import DFAStore
from main import DFASimulatorSystem, main

USER = UserIdentity(uid="u1")


@pytest.fixture
def system(tmp_path):
    settings = Settings(db_path=str(tmp_path / "dfas.db"), log_dir=str(tmp_path / "logs"))
    return DFASimulatorSystem(settings)


def test_run(system, binary_dfa):
    report = system.run(binary_dfa, "11")
    assert report.accepted
    assert report.trace.states == ["q0", "q1", "q1"]

def test_store_is_lazy(tmp_path):
    settings = Settings(db_path=str(tmp_path / "lazy" / "dfas.db"))
    system = DFASimulatorSystem(settings)
    assert not (tmp_path / "lazy").exists()
    assert isinstance(system.store, DFAStore)
    assert (tmp_path / "lazy").exists()

def test_save_requires_complete_record(system):
    with pytest.raises(RecordIncompleteError):
        system.save(USER, DFARecord(name="incomplete", states=["q0"], alphabet=["a"],
                                    initial_state="q0", accept_states=["q0"]))
    assert system.list_saved(USER) == []

def test_save_load_and_run_saved(system, binary_dfa):
    record = DFARecord.from_dfa(binary_dfa, "ones", test_strings=["000", "010", "0x1"])
    dfa_id = system.save(USER, record)
    assert system.load(USER, dfa_id).record == record

    results = system.run_saved(USER, dfa_id)
    assert [(s, r.accepted) for s, r in results] == [("000", False), ("010", True), ("0x1", False)]
    assert results[2][1].trace.halted

    system.delete(USER, dfa_id)
    assert system.list_saved(USER) == []


# --- Identity ---
@pytest.mark.parametrize("uid", [None, "", "   "])
def test_resolve_identity_requires_uid(uid):
    with pytest.raises(AuthenticationError):
        resolve_identity(uid)

def test_resolve_identity_strips():
    assert resolve_identity(" u1 ", "  ") == UserIdentity(uid="u1", email=None)


# --- CLI ---
CLI_ARGS = [
    "--states", "q0,q1", "--alphabet", "0,1", "--initial", "q0", "--accept", "q1",
    "-t", "q0,0=q0", "-t", "q0,1=q1", "-t", "q1,0=q1", "-t", "q1,1=q1",
]


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    monkeypatch.setenv("DFA_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("DFA_DB_PATH", str(tmp_path / "dfas.db"))


def test_cli_accepts(cli_env, capsys):
    assert main(CLI_ARGS + ["--input", "0011"]) == 0
    out = capsys.readouterr().out
    assert "ACCEPTED" in out
    assert "path: q0 -> q0 -> q0 -> q1 -> q1" in out

def test_cli_rejects(cli_env, capsys):
    assert main(CLI_ARGS + ["--input", "00"]) == 1
    assert "REJECTED" in capsys.readouterr().out

def test_cli_invalid_dfa(cli_env, capsys):
    assert main(CLI_ARGS[:-2] + ["--input", "1"]) == 2
    out = capsys.readouterr().out
    assert "INVALID DFA" in out
    assert "Missing transition for state q1 on input 1" in out

def test_cli_record_file(cli_env, tmp_path, binary_dfa, capsys):
    path = tmp_path / "dfa.json"
    record = DFARecord.from_dfa(binary_dfa, "ones", test_strings=["1", "0"])
    path.write_text(json.dumps(record.to_record()), encoding="utf-8")
    assert main(["--record", str(path)]) == 1
    out = capsys.readouterr().out
    assert out.count("ACCEPTED") == 1
    assert out.count("REJECTED") == 1
