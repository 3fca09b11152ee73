import itertools

import pytest
from dfa_engine.models import DFA, IssueCode
from dfa_engine.validator import DeterministicValidator, validate

validator = DeterministicValidator()


def make_dfa(transitions, states=("q0", "q1"), alphabet=("0", "1"), start="q0", accept=("q1",)):
    return DFA(
        states=list(states),
        alphabet=list(alphabet),
        transitions=transitions,
        start_state=start,
        accept_states=list(accept),
    )


VALID_TABLE = {"q0": {"0": "q0", "1": "q1"}, "q1": {"0": "q1", "1": "q1"}}


def test_valid_dfa(binary_dfa):
    result = validator.validate(binary_dfa)
    assert result.is_valid is True
    assert result.errors == []

def test_validate_is_idempotent(binary_dfa):
    broken = make_dfa({"q0": {"0": "q0", "1": "q9"}}, accept=("q1", "q2"))
    assert validator.validate(binary_dfa) == validator.validate(binary_dfa)
    assert validator.validate(broken) == validator.validate(broken)

def test_module_level_validate(binary_dfa):
    assert validate(binary_dfa).is_valid


# --- missing transition ---
def test_missing_transition_reported():
    dfa = make_dfa({"q0": {"0": "q0", "1": "q1"}, "q1": {"1": "q1"}})
    result = validator.validate(dfa)
    assert result.is_valid is False
    assert "Missing transition for state q1 on input 0" in result.errors

@pytest.mark.parametrize("state, symbol", list(itertools.product(["q0", "q1"], ["0", "1"])))
def test_single_removal_gives_exactly_one_error(state, symbol):
    table = {s: dict(row) for s, row in VALID_TABLE.items()}
    del table[state][symbol]
    result = validator.validate(make_dfa(table))
    assert result.errors == [f"Missing transition for state {state} on input {symbol}"]
    assert result.issues[0].code == IssueCode.MISSING_TRANSITION
    assert (result.issues[0].state, result.issues[0].symbol) == (state, symbol)


# --- start and accepting states must be declared ---
def test_unknown_accepting_state():
    result = validator.validate(make_dfa(VALID_TABLE, accept=("q1", "q2")))
    assert result.is_valid is False
    assert result.errors == ["Accepting state q2 is not defined in states list"]

def test_unknown_initial_state():
    result = validator.validate(make_dfa(VALID_TABLE, start="qs"))
    assert result.errors == ["Initial state qs is not defined in states list"]


# --- Table references ---
def test_unknown_source_symbol_and_destination():
    table = {
        "q0": {"0": "q0", "1": "q1", "2": "q0"},
        "q1": {"0": "q1", "1": "qx"},
        "ghost": {"0": "q0"},
    }
    result = validator.validate(make_dfa(table))
    assert result.errors == [
        "Input 2 for state q0 is not defined in alphabet list",
        "Transition from q1 on input 1 goes to undefined state qx",
        "State ghost in transition table is not defined in states list",
    ]

def test_state_without_row():
    result = validator.validate(make_dfa({"q0": {"0": "q0", "1": "q1"}}))
    assert result.errors == [
        "Missing transition for state q1 on input 0",
        "Missing transition for state q1 on input 1",
        "No transitions defined for state q1",
    ]
    assert result.issues[-1].code == IssueCode.NO_TRANSITIONS

def test_all_errors_accumulate_in_check_order():
    table = {"q0": {"0": "q5"}, "q9": {"0": "q0"}}
    result = validator.validate(make_dfa(table, start="qs", accept=("qa",)))
    codes = [issue.code for issue in result.issues]
    assert codes == [
        IssueCode.UNKNOWN_INITIAL_STATE,
        IssueCode.UNKNOWN_ACCEPT_STATE,
        IssueCode.UNKNOWN_DESTINATION,
        IssueCode.UNKNOWN_SOURCE_STATE,
        IssueCode.MISSING_TRANSITION,  # q0 on 1
        IssueCode.MISSING_TRANSITION,  # q1 on 0
        IssueCode.MISSING_TRANSITION,  # q1 on 1
        IssueCode.NO_TRANSITIONS,      # q1
    ]


# --- Shape of the declared sets ---
def test_empty_definition():
    dfa = DFA(states=[], alphabet=[], transitions={}, start_state="", accept_states=[])
    result = validator.validate(dfa)
    assert result.errors[:3] == ["States list is empty", "Alphabet is empty", "Accepting states list is empty"]
    assert "Initial state  is not defined in states list" in result.errors

def test_duplicates_reported_once():
    dfa = make_dfa(VALID_TABLE, states=("q0", "q1", "q0"), alphabet=("0", "1", "1"))
    result = validator.validate(dfa)
    assert result.errors == [
        "State q0 is declared more than once",
        "Input 1 is declared more than once",
    ]

def test_result_to_dict(binary_dfa):
    data = validator.validate(make_dfa(VALID_TABLE, accept=("q7",))).to_dict()
    assert data["is_valid"] is False
    assert data["errors"] == ["Accepting state q7 is not defined in states list"]
    assert data["issues"][0]["code"] == "UNKNOWN_ACCEPT_STATE"
