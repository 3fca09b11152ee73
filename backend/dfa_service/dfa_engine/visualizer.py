from typing import Dict, List, Optional, Set, Tuple

import graphviz
from graphviz import Digraph

from .models import DFA, ExecutionTrace

MISSING_CELL = "—"
START_POINTER = "start"


def _node_ids(dfa: DFA) -> Dict[str, str]:
    """Map every state name the DFA mentions to a DOT-safe node id."""
    names = list(dfa.states) + ([dfa.start_state] if dfa.start_state else [])
    for src, _, dest in dfa.transitions.entries():
        names.extend((src, dest))
    return {name: f"n{i}" for i, name in enumerate(dict.fromkeys(names))}


def build_digraph(dfa: DFA, trace: Optional[ExecutionTrace] = None) -> Digraph:
    """
    Graphviz diagram of the DFA. When a trace is given, the visited states
    and the edges taken are highlighted.

    Nodes use generated ids and carry the state name as label, so any
    state name is drawn as written.
    """
    visited: Set[str] = set()
    taken: Set[Tuple[str, str]] = set()
    if trace is not None:
        steps = [s for s in trace.steps if not s.is_error]
        visited = {s.state for s in steps}
        taken = {(a.state, b.state) for a, b in zip(steps, steps[1:])}

    ids = _node_ids(dfa)
    declared = set(dfa.states)

    dot = Digraph(comment="DFA Visualization")
    dot.attr(rankdir="LR")

    # Start pointer
    dot.node(START_POINTER, "", shape="none")
    if dfa.start_state in ids:
        dot.edge(START_POINTER, ids[dfa.start_state])

    for state, node_id in ids.items():
        attrs = {"shape": "doublecircle" if state in dfa.accept_states else "circle"}
        if state not in declared:
            attrs["style"] = "dashed"
        if state in visited:
            attrs.update(style="filled", fillcolor="lightblue")
        dot.node(node_id, graphviz.escape(state), **attrs)

    # One edge per (src, dest) with all its symbols as the label
    for src in dfa.transitions.source_states():
        by_dest: Dict[str, List[str]] = {}
        for symbol, dest in dfa.transitions.row(src).items():
            by_dest.setdefault(dest, []).append(symbol)
        for dest, symbols in by_dest.items():
            label = graphviz.escape(",".join(symbols))
            if (src, dest) in taken:
                dot.edge(ids[src], ids[dest], label=label, color="blue", penwidth="2")
            else:
                dot.edge(ids[src], ids[dest], label=label)

    return dot


def to_dot(dfa: DFA, trace: Optional[ExecutionTrace] = None) -> str:
    return build_digraph(dfa, trace).source


def transition_rows(dfa: DFA) -> List[Dict[str, str]]:
    """Transition table for display; every declared state gets a row."""
    rows = []
    for state in dict.fromkeys(dfa.states):
        row = {"State": state}
        for symbol in dict.fromkeys(dfa.alphabet):
            row[f"δ(q,{symbol})"] = dfa.transitions.lookup(state, symbol) or MISSING_CELL
        rows.append(row)
    return rows


def path_rows(trace: ExecutionTrace) -> List[Dict[str, str]]:
    return [
        {
            "Step": str(step.step),
            "Input": step.input,
            "State": step.state,
            "Description": step.description,
        }
        for step in trace.steps
    ]


def format_path(trace: ExecutionTrace) -> str:
    return " -> ".join(trace.states)
