import os
import sys
import tempfile

import pytest

# Ensure the service root (api.py, main.py, dfa_engine/) is on sys.path
HERE = os.path.dirname(__file__)
SERVICE_ROOT = os.path.abspath(os.path.join(HERE, ".."))

if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)

# Keep test runs away from the real database and log directory
_TMP = tempfile.mkdtemp(prefix="dfa_sim_test_")
os.environ.setdefault("DFA_DB_PATH", os.path.join(_TMP, "dfas.db"))
os.environ.setdefault("DFA_LOG_DIR", os.path.join(_TMP, "logs"))
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.pop("API_KEY", None)

from dfa_engine.models import DFA  # noqa: E402


@pytest.fixture
def binary_dfa():
    """Accepts strings over {0,1} containing at least one 1."""
    return DFA(
        states=["q0", "q1"],
        alphabet=["0", "1"],
        transitions={
            "q0": {"0": "q0", "1": "q1"},
            "q1": {"0": "q1", "1": "q1"},
        },
        start_state="q0",
        accept_states=["q1"],
    )


@pytest.fixture
def binary_form():
    return {
        "states": "q0, q1",
        "alphabet": "0, 1",
        "initial_state": "q0",
        "accept_states": "q1",
        "transitions": [
            {"from_state": "q0", "symbol": "0", "to_state": "q0"},
            {"from_state": "q0", "symbol": "1", "to_state": "q1"},
            {"from_state": "q1", "symbol": "0", "to_state": "q1"},
            {"from_state": "q1", "symbol": "1", "to_state": "q1"},
        ],
    }
