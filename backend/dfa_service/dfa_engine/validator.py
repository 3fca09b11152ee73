from collections import Counter
from typing import List

import structlog

from .models import DFA, IssueCode, ValidationIssue, ValidationResult

log = structlog.get_logger()


class DeterministicValidator:
    """
    Checks that a DFA is well-formed: every referenced state and symbol is
    declared and the transition function is total over states x alphabet.
    All violations are collected; nothing is raised for user input defects.
    """

    def validate(self, dfa: DFA) -> ValidationResult:
        issues: List[ValidationIssue] = []
        states = set(dfa.states)
        alphabet = set(dfa.alphabet)

        # 0. Shape of the declared sets
        if not dfa.states:
            issues.append(ValidationIssue(code=IssueCode.EMPTY_STATES, message="States list is empty"))
        if not dfa.alphabet:
            issues.append(ValidationIssue(code=IssueCode.EMPTY_ALPHABET, message="Alphabet is empty"))
        if not dfa.accept_states:
            issues.append(ValidationIssue(code=IssueCode.EMPTY_ACCEPT_STATES, message="Accepting states list is empty"))
        for state, count in Counter(dfa.states).items():
            if count > 1:
                issues.append(ValidationIssue(
                    code=IssueCode.DUPLICATE_STATE, state=state,
                    message=f"State {state} is declared more than once",
                ))
        for symbol, count in Counter(dfa.alphabet).items():
            if count > 1:
                issues.append(ValidationIssue(
                    code=IssueCode.DUPLICATE_SYMBOL, symbol=symbol,
                    message=f"Input {symbol} is declared more than once",
                ))

        # 1. Initial state
        if dfa.start_state not in states:
            issues.append(ValidationIssue(
                code=IssueCode.UNKNOWN_INITIAL_STATE, state=dfa.start_state,
                message=f"Initial state {dfa.start_state} is not defined in states list",
            ))

        # 2. Accepting states
        for state in dfa.accept_states:
            if state not in states:
                issues.append(ValidationIssue(
                    code=IssueCode.UNKNOWN_ACCEPT_STATE, state=state,
                    message=f"Accepting state {state} is not defined in states list",
                ))

        # 3-5. Everything the table refers to must be declared
        for state in dfa.transitions.source_states():
            if state not in states:
                issues.append(ValidationIssue(
                    code=IssueCode.UNKNOWN_SOURCE_STATE, state=state,
                    message=f"State {state} in transition table is not defined in states list",
                ))
            for symbol, dest in dfa.transitions.row(state).items():
                if symbol not in alphabet:
                    issues.append(ValidationIssue(
                        code=IssueCode.UNKNOWN_SYMBOL, state=state, symbol=symbol,
                        message=f"Input {symbol} for state {state} is not defined in alphabet list",
                    ))
                if dest not in states:
                    issues.append(ValidationIssue(
                        code=IssueCode.UNKNOWN_DESTINATION, state=state, symbol=symbol, destination=dest,
                        message=f"Transition from {state} on input {symbol} goes to undefined state {dest}",
                    ))

        # 6. Totality over the declared states, not the table keys
        declared_states = list(dict.fromkeys(dfa.states))
        declared_symbols = list(dict.fromkeys(dfa.alphabet))
        for state in declared_states:
            for symbol in declared_symbols:
                if dfa.transitions.lookup(state, symbol) is None:
                    issues.append(ValidationIssue(
                        code=IssueCode.MISSING_TRANSITION, state=state, symbol=symbol,
                        message=f"Missing transition for state {state} on input {symbol}",
                    ))

        # 7. Every declared state needs a row of its own
        for state in declared_states:
            if not dfa.transitions.has_row(state):
                issues.append(ValidationIssue(
                    code=IssueCode.NO_TRANSITIONS, state=state,
                    message=f"No transitions defined for state {state}",
                ))

        result = ValidationResult(issues=tuple(issues))
        log.info("dfa_validated", is_valid=result.is_valid, issue_count=len(issues),
                 states=len(declared_states), alphabet_size=len(declared_symbols))
        return result


_default_validator = DeterministicValidator()


def validate(dfa: DFA) -> ValidationResult:
    """Module-level shortcut for DeterministicValidator().validate()."""
    return _default_validator.validate(dfa)
