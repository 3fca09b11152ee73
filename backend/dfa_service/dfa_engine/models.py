from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, RootModel

State = str
Symbol = str

# Sentinels used in execution traces
START_INPUT = "Start"
ERROR_STATE = "Error"


class TransitionFunction(RootModel[Dict[State, Dict[Symbol, State]]]):
    """
    Two-level lookup table: source state -> input symbol -> destination state.
    Row order follows insertion order, which the builder ties to the declared
    state order.
    """
    root: Dict[State, Dict[Symbol, State]] = Field(default_factory=dict)

    def lookup(self, state: State, symbol: Symbol) -> Optional[State]:
        return self.root.get(state, {}).get(symbol)

    def row(self, state: State) -> Dict[Symbol, State]:
        return dict(self.root.get(state, {}))

    def has_row(self, state: State) -> bool:
        return bool(self.root.get(state))

    def source_states(self) -> List[State]:
        return list(self.root.keys())

    def entries(self) -> Iterator[Tuple[State, Symbol, State]]:
        for state, row in self.root.items():
            for symbol, dest in row.items():
                yield state, symbol, dest

    def to_dict(self) -> Dict[State, Dict[Symbol, State]]:
        return {state: dict(row) for state, row in self.root.items()}

    def __len__(self) -> int:
        return sum(len(row) for row in self.root.values())


class DFA(BaseModel):
    """
    A candidate automaton as submitted by the user.
    Semantic defects are not rejected here; run it through validate() first.
    """
    states: List[State]
    alphabet: List[Symbol]
    transitions: TransitionFunction = Field(default_factory=TransitionFunction)
    start_state: State
    accept_states: List[State]

    def next_state(self, state: State, symbol: Symbol) -> Optional[State]:
        return self.transitions.lookup(state, symbol)


class IssueCode(str, Enum):
    """Validation issue categories, in the order the checks run."""
    EMPTY_STATES = "EMPTY_STATES"
    EMPTY_ALPHABET = "EMPTY_ALPHABET"
    EMPTY_ACCEPT_STATES = "EMPTY_ACCEPT_STATES"
    DUPLICATE_STATE = "DUPLICATE_STATE"
    DUPLICATE_SYMBOL = "DUPLICATE_SYMBOL"
    UNKNOWN_INITIAL_STATE = "UNKNOWN_INITIAL_STATE"
    UNKNOWN_ACCEPT_STATE = "UNKNOWN_ACCEPT_STATE"
    UNKNOWN_SOURCE_STATE = "UNKNOWN_SOURCE_STATE"
    UNKNOWN_SYMBOL = "UNKNOWN_SYMBOL"
    UNKNOWN_DESTINATION = "UNKNOWN_DESTINATION"
    MISSING_TRANSITION = "MISSING_TRANSITION"
    NO_TRANSITIONS = "NO_TRANSITIONS"


class ValidationIssue(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: IssueCode
    message: str
    state: Optional[State] = None
    symbol: Optional[Symbol] = None
    destination: Optional[State] = None


class ValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    issues: Tuple[ValidationIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.issues

    @property
    def errors(self) -> List[str]:
        return [issue.message for issue in self.issues]

    def to_dict(self) -> Dict:
        return {
            "is_valid": self.is_valid,
            "errors": self.errors,
            "issues": [issue.model_dump(mode="json") for issue in self.issues],
        }


class ExecutionStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    step: int = Field(..., ge=0)
    input: str
    state: str
    description: str
    is_error: bool = False


class ExecutionTrace(BaseModel):
    """Immutable record of one run of a DFA over an input string."""
    model_config = ConfigDict(frozen=True)

    input_string: str
    steps: Tuple[ExecutionStep, ...]

    @property
    def final_step(self) -> ExecutionStep:
        return self.steps[-1]

    @property
    def states(self) -> List[str]:
        return [step.state for step in self.steps]

    @property
    def halted(self) -> bool:
        return self.final_step.is_error

    def __len__(self) -> int:
        return len(self.steps)


class SimulationReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    validation: ValidationResult
    trace: Optional[ExecutionTrace] = None
    accepted: bool = False

    def to_dict(self) -> Dict:
        return {
            "valid": self.validation.is_valid,
            "errors": self.validation.errors,
            "trace": [step.model_dump() for step in self.trace.steps] if self.trace else None,
            "accepted": self.accepted,
        }
