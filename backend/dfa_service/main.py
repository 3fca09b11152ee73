import argparse
import json
import os
import sys
from typing import List, Optional, Tuple

from dfa_engine.builder import build_dfa, parse_transition_lines
from dfa_engine.config import Settings, load_settings
from dfa_engine.identity import UserIdentity
from dfa_engine.logging_config import get_logger, setup_logging
from dfa_engine.models import DFA, ExecutionTrace, SimulationReport
from dfa_engine.records import DFARecord
from dfa_engine.simulator import DFASimulator
from dfa_engine.store import DFAStore, StoredDFA
from dfa_engine.validator import DeterministicValidator
from dfa_engine.visualizer import build_digraph, format_path, path_rows

log = get_logger(__name__)

# --- Graphviz Path Fix ---
possible_paths = [
    r"C:\Program Files\Graphviz\bin",
    r"C:\Program Files (x86)\Graphviz\bin",
    "/usr/local/bin",
    "/usr/bin"
]
for path in possible_paths:
    if os.path.exists(path) and path not in os.environ.get("PATH", "").split(os.pathsep):
        os.environ["PATH"] += os.pathsep + path


class DFASimulatorSystem:
    def __init__(self, settings: Optional[Settings] = None, store: Optional[DFAStore] = None):
        self.settings = settings or load_settings()
        self.validator = DeterministicValidator()
        self.simulator = DFASimulator(self.validator)
        self._store = store

    @property
    def store(self) -> DFAStore:
        # Opened on first use so pure simulation never touches the disk
        if self._store is None:
            self._store = DFAStore(self.settings.db_path)
        return self._store

    def run(self, dfa: DFA, input_string: str) -> SimulationReport:
        return self.simulator.run(dfa, input_string)

    def save(self, owner: UserIdentity, record: DFARecord) -> str:
        record.ensure_complete()
        return self.store.create(owner, record)

    def list_saved(self, owner: UserIdentity) -> List[StoredDFA]:
        return self.store.list_for_user(owner.uid)

    def load(self, owner: UserIdentity, dfa_id: str) -> StoredDFA:
        return self.store.get(dfa_id, owner.uid)

    def delete(self, owner: UserIdentity, dfa_id: str) -> None:
        self.store.delete(dfa_id, owner.uid)

    def run_saved(self, owner: UserIdentity, dfa_id: str) -> List[Tuple[str, SimulationReport]]:
        """Replay every stored test string of a saved DFA."""
        record = self.load(owner, dfa_id).record
        reports = self.simulator.simulate_many(record.to_dfa(), record.test_strings)
        log.info("saved_dfa_replayed", dfa_id=dfa_id[:8], strings=len(reports),
                 accepted=sum(1 for r in reports if r.accepted))
        return list(zip(record.test_strings, reports))

    def visualizer_tool(self, dfa: DFA, trace: Optional[ExecutionTrace] = None, filename: str = "dfa_result"):
        try:
            output_dir = "output"
            if not os.path.exists(output_dir):
                os.makedirs(output_dir)
            clean_name = filename.replace(" ", "_").lower()
            output_file = build_digraph(dfa, trace).render(os.path.join(output_dir, clean_name), format="png")
            print(f"\n[Visualizer] Graph saved to {output_file}")
        except Exception as e:
            # Missing dot binary only costs the picture
            print(f"\n[Visualizer] Skipped (Graphviz error): {e}")


def _dfa_from_args(args) -> Tuple[DFA, List[str]]:
    if args.record:
        with open(args.record, "r", encoding="utf-8") as f:
            record = DFARecord.model_validate(json.load(f))
        inputs = [args.input] if args.input is not None else (record.test_strings or [""])
        return record.to_dfa(), inputs

    entries = parse_transition_lines(args.transition or [])
    dfa = build_dfa(args.states, args.alphabet, args.initial, args.accept, entries)
    return dfa, [args.input or ""]


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Validate a DFA and trace it over input strings")
    parser.add_argument("--states", type=str, default="", help="Comma-separated states, e.g. q0,q1")
    parser.add_argument("--alphabet", type=str, default="", help="Comma-separated input symbols, e.g. 0,1")
    parser.add_argument("--initial", type=str, default="", help="Initial state")
    parser.add_argument("--accept", type=str, default="", help="Comma-separated accepting states")
    parser.add_argument("--transition", "-t", action="append", help="Transition as 'from,input=to' (repeatable)")
    parser.add_argument("--record", type=str, help="JSON file holding a saved DFA record")
    parser.add_argument("--input", "-i", type=str, default=None, help="Input string to simulate")
    parser.add_argument("--render", action="store_true", help="Render the DFA to output/dfa_result.png")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Console log level")
    args = parser.parse_args(argv)

    settings = load_settings()
    setup_logging(settings, log_level=args.log_level)
    system = DFASimulatorSystem(settings)

    dfa, inputs = _dfa_from_args(args)
    exit_code = 0
    for input_string in inputs:
        report = system.run(dfa, input_string)

        if not report.validation.is_valid:
            print("\n--- INVALID DFA ---")
            for error in report.validation.errors:
                print(f"   - {error}")
            return 2

        print(f"\n[Simulator] Input '{input_string}'")
        for row in path_rows(report.trace):
            print(f"   {row['Step']:>4}  {row['Input']:<6} {row['State']:<10} {row['Description']}")
        print(f"   path: {format_path(report.trace)}")
        print(f"--- {'ACCEPTED' if report.accepted else 'REJECTED'} ---")
        if not report.accepted:
            exit_code = 1

        if args.render:
            system.visualizer_tool(dfa, report.trace)

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
