from typing import Iterable, List

import structlog

from .models import (
    DFA,
    ERROR_STATE,
    START_INPUT,
    ExecutionStep,
    ExecutionTrace,
    SimulationReport,
)
from .validator import DeterministicValidator

log = structlog.get_logger()


class DFASimulator:
    """
    Replays an input string on a DFA and records every step.

    simulate() assumes the DFA already passed validation. On an unvalidated
    DFA it still runs, and stops with an "Error" step at the first missing
    transition. Input characters are not checked against the alphabet, so a
    foreign character ends the run the same way.
    """

    def __init__(self, validator: DeterministicValidator = None):
        self.validator = validator or DeterministicValidator()

    def simulate(self, dfa: DFA, input_string: str) -> ExecutionTrace:
        if not isinstance(dfa, DFA):
            raise TypeError(f"simulate() requires a DFA, got {type(dfa).__name__}")
        if input_string is None:
            input_string = ""

        current = dfa.start_state
        steps: List[ExecutionStep] = [
            ExecutionStep(step=0, input=START_INPUT, state=current, description="Initial state")
        ]

        for i, char in enumerate(input_string):
            nxt = dfa.next_state(current, char)
            if nxt is None:
                steps.append(ExecutionStep(
                    step=i + 1, input=char, state=ERROR_STATE,
                    description="No valid transition", is_error=True,
                ))
                log.info("simulation_halted", position=i, symbol=char, state=current)
                break
            current = nxt
            steps.append(ExecutionStep(
                step=i + 1, input=char, state=current,
                description=f"Transition on input '{char}'",
            ))

        return ExecutionTrace(input_string=input_string, steps=tuple(steps))

    def is_accepted(self, dfa: DFA, trace: ExecutionTrace) -> bool:
        final = trace.final_step
        return not final.is_error and final.state in dfa.accept_states

    def run(self, dfa: DFA, input_string: str) -> SimulationReport:
        """Validate, then simulate only when the DFA is well-formed."""
        validation = self.validator.validate(dfa)
        if not validation.is_valid:
            return SimulationReport(validation=validation)

        trace = self.simulate(dfa, input_string)
        accepted = self.is_accepted(dfa, trace)
        log.info("simulation_complete", input_length=len(trace.input_string),
                 final_state=trace.final_step.state, accepted=accepted)
        return SimulationReport(validation=validation, trace=trace, accepted=accepted)

    def simulate_many(self, dfa: DFA, input_strings: Iterable[str]) -> List[SimulationReport]:
        validation = self.validator.validate(dfa)
        if not validation.is_valid:
            return [SimulationReport(validation=validation) for _ in input_strings]

        reports = []
        for s in input_strings:
            trace = self.simulate(dfa, s)
            reports.append(SimulationReport(
                validation=validation, trace=trace, accepted=self.is_accepted(dfa, trace),
            ))
        return reports


_default_simulator = DFASimulator()


def simulate(dfa: DFA, input_string: str) -> ExecutionTrace:
    return _default_simulator.simulate(dfa, input_string)


def is_accepted(dfa: DFA, trace: ExecutionTrace) -> bool:
    return _default_simulator.is_accepted(dfa, trace)
