"""
Core modules for DFA Simulator.
Centralized exports for the builder, validator, simulator and store.
"""

from .models import (
    DFA,
    ERROR_STATE,
    START_INPUT,
    ExecutionStep,
    ExecutionTrace,
    IssueCode,
    SimulationReport,
    TransitionFunction,
    ValidationIssue,
    ValidationResult,
)

from .builder import (
    TransitionEntry,
    blank_table,
    build_dfa,
    build_transition_function,
    default_endpoints,
    parse_symbol_list,
    parse_transition_lines,
)

from .validator import DeterministicValidator, validate
from .simulator import DFASimulator, is_accepted, simulate

from .records import DFARecord
from .store import DFAStore, StoredDFA
from .identity import UserIdentity, resolve_identity

from .errors import (
    AuthenticationError,
    DFANotFoundError,
    DFAOwnershipError,
    DFASimulatorError,
    RecordIncompleteError,
)

__all__ = [
    # Models
    "DFA",
    "ERROR_STATE",
    "START_INPUT",
    "ExecutionStep",
    "ExecutionTrace",
    "IssueCode",
    "SimulationReport",
    "TransitionFunction",
    "ValidationIssue",
    "ValidationResult",
    # Builder
    "TransitionEntry",
    "blank_table",
    "build_dfa",
    "build_transition_function",
    "default_endpoints",
    "parse_symbol_list",
    "parse_transition_lines",
    # Engine
    "DeterministicValidator",
    "validate",
    "DFASimulator",
    "simulate",
    "is_accepted",
    # Persistence / identity
    "DFARecord",
    "DFAStore",
    "StoredDFA",
    "UserIdentity",
    "resolve_identity",
    # Errors
    "AuthenticationError",
    "DFANotFoundError",
    "DFAOwnershipError",
    "DFASimulatorError",
    "RecordIncompleteError",
]
