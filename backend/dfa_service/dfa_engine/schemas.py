"""
Request Schemas for DFA Simulator API
Pydantic models for the form payloads, with input sanitization.
"""

import re
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .builder import TransitionEntry, build_dfa
from .models import DFA
from .records import DFARecord

# Overridden from Settings.max_input_length at app startup
MAX_INPUT_LENGTH = 1000
MAX_NAME_LENGTH = 120
_CONTROL_CHAR_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def strip_control_chars(v: str) -> str:
    return _CONTROL_CHAR_RE.sub("", v)


class DFAForm(BaseModel):
    """
    The DFA definition form. List fields accept either a comma-separated
    string or a JSON list.
    """
    states: Union[str, List[str]] = Field(..., description="States (Q)")
    alphabet: Union[str, List[str]] = Field(..., description="Input alphabet (Σ)")
    initial_state: str = Field(default="", description="Initial state (q₀)")
    accept_states: Union[str, List[str]] = Field(default="", description="Accepting states (F)")
    transitions: List[TransitionEntry] = Field(default_factory=list, description="Transition table cells")

    def to_dfa(self) -> DFA:
        return build_dfa(self.states, self.alphabet, self.initial_state, self.accept_states, self.transitions)


class SimulationRequest(DFAForm):
    input_string: str = Field(default="", description="String to run through the DFA")

    @field_validator("input_string", mode="before")
    @classmethod
    def sanitize_input(cls, v) -> str:
        if v is None:
            return ""
        if not isinstance(v, str):
            raise ValueError("Input string must be a string.")
        # Simulated verbatim: whitespace is a symbol like any other
        if _CONTROL_CHAR_RE.search(v):
            raise ValueError("Input string must not contain control characters.")
        if len(v) > MAX_INPUT_LENGTH:
            raise ValueError(f"Input string exceeds maximum length of {MAX_INPUT_LENGTH} characters.")
        return v


class SaveDFARequest(DFAForm):
    name: str
    description: str = ""
    test_strings: List[str] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def sanitize_name(cls, v) -> str:
        if not isinstance(v, str):
            raise ValueError("Name must be a string.")
        v = strip_control_chars(v.strip())
        if not v:
            raise ValueError("Please enter a name for your DFA")
        if len(v) > MAX_NAME_LENGTH:
            raise ValueError(f"Name exceeds maximum length of {MAX_NAME_LENGTH} characters.")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def sanitize_description(cls, v) -> str:
        return strip_control_chars(v.strip()) if isinstance(v, str) else ""

    @field_validator("test_strings")
    @classmethod
    def drop_blank_strings(cls, v: List[str]) -> List[str]:
        return [s.strip() for s in v if s and s.strip()]

    def to_record(self) -> DFARecord:
        return DFARecord.from_dfa(
            self.to_dfa(),
            name=self.name,
            description=self.description,
            test_strings=self.test_strings,
        )


class DFASummary(BaseModel):
    """Listing entry for saved DFAs."""
    id: str
    name: str
    description: str = ""
    states: int
    alphabet: List[str]
    created_at: float
    created_by: Optional[str] = None
