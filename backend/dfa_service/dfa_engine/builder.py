"""
Transition Table Builder for DFA Simulator
Turns raw form values into a normalized TransitionFunction / DFA.

Builder-level defects (empty cells, malformed lines) never raise: the
offending entry is left out and validation reports the gap later.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import structlog
from pydantic import BaseModel, Field

from .models import DFA, State, Symbol, TransitionFunction

log = structlog.get_logger()

RawList = Union[str, Iterable[str]]


class TransitionEntry(BaseModel):
    """One cell of the transition table form."""
    from_state: str = Field(..., description="Source state token")
    symbol: str = Field(..., description="Input symbol token")
    to_state: str = Field(default="", description="Destination state token, empty when the cell is blank")

    def as_triple(self) -> Tuple[str, str, str]:
        return self.from_state, self.symbol, self.to_state


def parse_symbol_list(raw: Optional[RawList]) -> List[str]:
    """
    Split a comma-separated field into trimmed tokens.
    Empty tokens are dropped; order and duplicates are kept.
    """
    if raw is None:
        return []
    tokens = raw.split(",") if isinstance(raw, str) else raw
    return [str(t).strip() for t in tokens if str(t).strip()]


def _as_triple(entry) -> Tuple[str, str, str]:
    if isinstance(entry, TransitionEntry):
        return entry.as_triple()
    if isinstance(entry, dict):
        return entry.get("from_state", ""), entry.get("symbol", ""), entry.get("to_state", "")
    from_token, input_token, to_token = entry
    return from_token, input_token, to_token


def build_transition_function(
    states: Sequence[str],
    raw_entries: Iterable,
) -> TransitionFunction:
    """
    Assemble the transition table from (from, input, to) triples.

    Tokens are trimmed. A blank destination means the cell was left empty
    and the entry is omitted. Unknown states and symbols are kept as given.
    If the same (from, input) pair appears twice, the last entry wins.
    """
    table: Dict[State, Dict[Symbol, State]] = {}

    for entry in raw_entries:
        from_token, input_token, to_token = (str(t or "").strip() for t in _as_triple(entry))

        if not to_token:
            continue
        if not from_token or not input_token:
            log.warning("transition_entry_skipped", from_state=from_token, symbol=input_token, to_state=to_token)
            continue

        row = table.setdefault(from_token, {})
        if input_token in row and row[input_token] != to_token:
            log.debug("transition_overwritten", from_state=from_token, symbol=input_token,
                      previous=row[input_token], to_state=to_token)
        row[input_token] = to_token

    # Declared states first, in declared order; undeclared rows keep first-seen order
    declared = [s.strip() for s in states if s and s.strip()]
    ordered = {s: table[s] for s in declared if s in table}
    for state, row in table.items():
        ordered.setdefault(state, row)

    return TransitionFunction(ordered)


def parse_transition_lines(lines: Iterable[str]) -> List[TransitionEntry]:
    """
    Parse lines of the form ``from,input=to``.
    Malformed lines are skipped with a warning.
    """
    entries: List[TransitionEntry] = []
    for line in lines:
        if not line or not line.strip():
            continue
        lhs, sep, rhs = line.partition("=")
        from_token, comma, input_token = lhs.partition(",")
        if not sep or not comma:
            log.warning("transition_line_malformed", line=line)
            continue
        entries.append(TransitionEntry(
            from_state=from_token.strip(),
            symbol=input_token.strip(),
            to_state=rhs.strip(),
        ))
    return entries


def build_dfa(
    states: RawList,
    alphabet: RawList,
    start_state: str,
    accept_states: RawList,
    entries: Iterable,
) -> DFA:
    state_list = parse_symbol_list(states)
    return DFA(
        states=state_list,
        alphabet=parse_symbol_list(alphabet),
        transitions=build_transition_function(state_list, entries),
        start_state=(start_state or "").strip(),
        accept_states=parse_symbol_list(accept_states),
    )


def blank_table(states: RawList, alphabet: RawList) -> List[TransitionEntry]:
    """Empty cell grid, one cell per (state, symbol), in row-major order."""
    return [
        TransitionEntry(from_state=state, symbol=symbol)
        for state in parse_symbol_list(states)
        for symbol in parse_symbol_list(alphabet)
    ]


def default_endpoints(states: RawList) -> Tuple[str, List[str]]:
    """Form defaults once the table is generated: first state starts, last state accepts."""
    state_list = parse_symbol_list(states)
    if not state_list:
        return "", []
    return state_list[0], [state_list[-1]]
