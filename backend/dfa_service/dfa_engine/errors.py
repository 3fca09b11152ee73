"""
Exception hierarchy for DFA Simulator.

User-input defects in a DFA are reported through ValidationResult, not
raised. These exceptions cover the store and identity collaborators.
"""


class DFASimulatorError(Exception):
    """Base class for all DFA Simulator errors."""
    pass


class AuthenticationError(DFASimulatorError):
    """Raised when an operation needs a signed-in user and none is given."""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class DFANotFoundError(DFASimulatorError):
    """Raised when a saved DFA id does not exist."""

    def __init__(self, dfa_id: str):
        self.dfa_id = dfa_id
        super().__init__("DFA not found")


class DFAOwnershipError(DFASimulatorError):
    """Raised when a user touches a DFA saved by someone else."""

    def __init__(self, dfa_id: str):
        self.dfa_id = dfa_id
        super().__init__("Unauthorized: This DFA belongs to another user")


class RecordIncompleteError(DFASimulatorError):
    """Raised when a DFA record misses fields required for saving."""

    def __init__(self, problems):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))
