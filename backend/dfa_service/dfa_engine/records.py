"""
Persisted DFA record for DFA Simulator.
Flat, JSON-friendly shape shared with the document store.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .builder import build_transition_function
from .errors import RecordIncompleteError
from .models import DFA


class DFARecord(BaseModel):
    """
    Schema for a saved DFA.
    Field names on the wire are camelCase (initialState, transitionTable, ...).
    """
    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str = ""
    states: List[str] = Field(default_factory=list)
    alphabet: List[str] = Field(default_factory=list)
    initial_state: str = Field(default="", alias="initialState")
    accept_states: List[str] = Field(default_factory=list, alias="acceptStates")
    transition_table: Dict[str, Dict[str, str]] = Field(default_factory=dict, alias="transitionTable")
    test_strings: List[str] = Field(default_factory=list, alias="testStrings")

    @classmethod
    def from_dfa(
        cls,
        dfa: DFA,
        name: str,
        description: str = "",
        test_strings: Optional[List[str]] = None,
    ) -> "DFARecord":
        return cls(
            name=name,
            description=description or "",
            states=list(dfa.states),
            alphabet=list(dfa.alphabet),
            initial_state=dfa.start_state,
            accept_states=list(dfa.accept_states),
            transition_table=dfa.transitions.to_dict(),
            test_strings=list(test_strings or []),
        )

    def to_dfa(self) -> DFA:
        return DFA(
            states=list(self.states),
            alphabet=list(self.alphabet),
            transitions=build_transition_function(
                self.states,
                ((state, symbol, dest) for state, row in self.transition_table.items() for symbol, dest in row.items()),
            ),
            start_state=self.initial_state,
            accept_states=list(self.accept_states),
        )

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    def empty_cell_count(self) -> int:
        return sum(
            1
            for state in self.states
            for symbol in self.alphabet
            if not self.transition_table.get(state, {}).get(symbol, "").strip()
        )

    def save_problems(self) -> List[str]:
        """Reasons this record cannot be saved yet, in the order the form reports them."""
        problems = []
        if not self.name.strip():
            problems.append("Please enter a name for your DFA")
        if not self.states:
            problems.append("Please define states (Q) for your DFA")
        if not self.alphabet:
            problems.append("Please define input alphabet (Σ) for your DFA")
        if not self.initial_state.strip():
            problems.append("Please specify an initial state (q₀)")
        if not self.accept_states:
            problems.append("Please specify at least one accepting state (F)")
        empty = self.empty_cell_count()
        if empty:
            problems.append(f"Please fill in all transitions ({empty} cells are empty)")
        return problems

    def ensure_complete(self) -> None:
        problems = self.save_problems()
        if problems:
            raise RecordIncompleteError(problems)
