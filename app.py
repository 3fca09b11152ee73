import sys
from pathlib import Path

import streamlit as st

sys.path.insert(0, str(Path(__file__).parent / "backend" / "dfa_service"))

from dfa_engine.builder import build_dfa, default_endpoints, parse_symbol_list  # noqa: E402
from dfa_engine.errors import DFASimulatorError  # noqa: E402
from dfa_engine.identity import resolve_identity  # noqa: E402
from dfa_engine.records import DFARecord  # noqa: E402
from dfa_engine.visualizer import build_digraph, path_rows, transition_rows  # noqa: E402
from main import DFASimulatorSystem  # noqa: E402


@st.cache_resource
def get_system() -> DFASimulatorSystem:
    return DFASimulatorSystem()


def load_into_form(record: DFARecord):
    st.session_state["states"] = ", ".join(record.states)
    st.session_state["alphabet"] = ", ".join(record.alphabet)
    st.session_state["initial"] = record.initial_state
    st.session_state["accept"] = ", ".join(record.accept_states)
    st.session_state["input_string"] = record.test_strings[0] if record.test_strings else ""
    for state in record.states:
        for symbol in record.alphabet:
            st.session_state[f"cell::{state}::{symbol}"] = record.transition_table.get(state, {}).get(symbol, "")
    st.session_state["table_generated"] = True


system = get_system()

st.title("DFA Simulator")
st.caption("Define a deterministic finite automaton, then trace an input string through it.")

# --- Account ---
with st.sidebar:
    st.subheader("My DFAs")
    user_id = st.text_input("User id", key="user_id")
    user_email = st.text_input("Email (optional)", key="user_email")
    user = None
    if user_id.strip():
        user = resolve_identity(user_id, user_email)
        for stored in system.list_saved(user):
            cols = st.columns([3, 1, 1])
            cols[0].write(f"**{stored.record.name}**  \n{len(stored.record.states)} states")
            if cols[1].button("Load", key=f"load::{stored.id}"):
                load_into_form(stored.record)
                st.rerun()
            if cols[2].button("Delete", key=f"delete::{stored.id}"):
                system.delete(user, stored.id)
                st.rerun()
    else:
        st.info("Enter a user id to save and load DFAs.")

# --- Definition ---
st.session_state.setdefault("states", "q0, q1")
st.session_state.setdefault("alphabet", "0, 1")
states_raw = st.text_input("States (Q), comma-separated", key="states")
alphabet_raw = st.text_input("Input alphabet (Σ), comma-separated", key="alphabet")

if st.button("Generate Transition Table"):
    if not parse_symbol_list(states_raw) or not parse_symbol_list(alphabet_raw):
        st.warning("Please enter both states and input alphabet symbols.")
    else:
        initial, accept = default_endpoints(states_raw)
        st.session_state["initial"] = initial
        st.session_state["accept"] = ", ".join(accept)
        st.session_state["table_generated"] = True

if st.session_state.get("table_generated"):
    states = parse_symbol_list(states_raw)
    alphabet = parse_symbol_list(alphabet_raw)

    initial_state = st.text_input("Initial state (q₀)", key="initial")
    accept_raw = st.text_input("Accepting states (F), comma-separated", key="accept")

    st.subheader("Transition Table")
    header = st.columns(len(alphabet) + 1)
    for col, symbol in zip(header[1:], alphabet):
        col.markdown(f"**{symbol}**")

    entries = []
    for state in states:
        row = st.columns(len(alphabet) + 1)
        row[0].markdown(f"**{state}**")
        for col, symbol in zip(row[1:], alphabet):
            to_state = col.text_input(
                f"δ({state},{symbol})", key=f"cell::{state}::{symbol}",
                placeholder="next state", label_visibility="collapsed",
            )
            entries.append((state, symbol, to_state))

    input_string = st.text_input("Input string", key="input_string")
    dfa = build_dfa(states_raw, alphabet_raw, initial_state, accept_raw, entries)

    if st.button("Simulate"):
        report = system.run(dfa, input_string)
        if not report.validation.is_valid:
            st.error("Invalid transition table configuration.")
            for error in report.validation.errors:
                st.markdown(f"- {error}")
        else:
            st.table(transition_rows(dfa))
            st.subheader("Execution Path")
            st.table(path_rows(report.trace))
            if report.accepted:
                st.success(f'The input string "{input_string}" is accepted by the DFA.')
            else:
                st.error(f'The input string "{input_string}" is rejected by the DFA.')
            st.graphviz_chart(build_digraph(dfa, report.trace))

    # --- Save ---
    if user is not None:
        with st.expander("Save DFA"):
            name = st.text_input("Name", key="dfa_name")
            description = st.text_area("Description", key="dfa_description")
            if st.button("Save"):
                record = DFARecord.from_dfa(
                    dfa, name.strip(), description.strip(),
                    [input_string.strip()] if input_string.strip() else [],
                )
                try:
                    system.save(user, record)
                    st.success("Your DFA has been saved successfully.")
                except DFASimulatorError as e:
                    st.error(f"Cannot save DFA: {e}")
