import pytest
from dfa_engine.builder import (
    TransitionEntry,
    blank_table,
    build_dfa,
    build_transition_function,
    default_endpoints,
    parse_symbol_list,
    parse_transition_lines,
)


# --- 1. Symbol lists ---
def test_parse_symbol_list_trims_and_drops_empty():
    assert parse_symbol_list(" q0 , q1,, ,q2 ") == ["q0", "q1", "q2"]
    assert parse_symbol_list("") == []
    assert parse_symbol_list(None) == []

def test_parse_symbol_list_keeps_duplicates_and_order():
    assert parse_symbol_list("b,a,b") == ["b", "a", "b"]
    assert parse_symbol_list([" x ", "", "y"]) == ["x", "y"]


# --- 2. Transition function assembly ---
def test_build_trims_tokens():
    tf = build_transition_function(["q0"], [(" q0 ", " a ", " q0 ")])
    assert tf.lookup("q0", "a") == "q0"

def test_blank_destination_is_omitted():
    tf = build_transition_function(["q0", "q1"], [("q0", "a", "q1"), ("q1", "a", "   ")])
    assert tf.lookup("q1", "a") is None
    assert not tf.has_row("q1")
    assert len(tf) == 1

def test_unknown_tokens_are_kept():
    tf = build_transition_function(["q0"], [("q9", "z", "q7")])
    assert tf.lookup("q9", "z") == "q7"

def test_last_write_wins_for_duplicate_pairs():
    tf = build_transition_function(["q0", "q1"], [("q0", "a", "q0"), ("q0", "a", "q1")])
    assert tf.lookup("q0", "a") == "q1"
    assert len(tf) == 1

def test_rows_follow_declared_state_order():
    entries = [("extra", "a", "q0"), ("q1", "a", "q0"), ("q0", "a", "q1")]
    tf = build_transition_function(["q0", "q1"], entries)
    assert tf.source_states() == ["q0", "q1", "extra"]

def test_accepts_entry_models_and_dicts():
    entries = [
        TransitionEntry(from_state="q0", symbol="a", to_state="q0"),
        {"from_state": "q0", "symbol": "b", "to_state": "q0"},
    ]
    tf = build_transition_function(["q0"], entries)
    assert tf.row("q0") == {"a": "q0", "b": "q0"}

def test_builder_does_not_mutate_inputs():
    entries = [("q0", "a", "q0")]
    build_transition_function(["q0"], entries)
    assert entries == [("q0", "a", "q0")]


# --- 3. Line format ---
def test_parse_transition_lines():
    entries = parse_transition_lines(["q0,0=q1", " q1 , 1 = q0 ", "", "garbage", "q0=q1"])
    assert [e.as_triple() for e in entries] == [("q0", "0", "q1"), ("q1", "1", "q0")]


# --- 4. Form helpers ---
def test_build_dfa_from_raw_strings():
    dfa = build_dfa("q0,q1", "a,b", " q0 ", "q1", [("q0", "a", "q1")])
    assert dfa.states == ["q0", "q1"]
    assert dfa.alphabet == ["a", "b"]
    assert dfa.start_state == "q0"
    assert dfa.accept_states == ["q1"]
    assert dfa.next_state("q0", "a") == "q1"

def test_blank_table_is_row_major():
    cells = blank_table("q0,q1", "a,b")
    assert [(c.from_state, c.symbol) for c in cells] == [("q0", "a"), ("q0", "b"), ("q1", "a"), ("q1", "b")]
    assert all(c.to_state == "" for c in cells)

@pytest.mark.parametrize("raw, expected", [
    ("q0,q1,q2", ("q0", ["q2"])),
    ("only", ("only", ["only"])),
    ("", ("", [])),
])
def test_default_endpoints(raw, expected):
    assert default_endpoints(raw) == expected
