"""Replay a scripted list of player actions against a puzzle and print the resulting session as JSON."""

# demo_cli.py
# End-to-end demo:
# - Loads an 81-char puzzle (or the built-in demo puzzle)
# - Validates it against a known solution and starts the requested game mode
# - Replays actions from a JSON script: select / deselect / move / input / note / delete / undo / mode
# - Prints the final session snapshot
#
# Usage:
#   python -m apps.cli.demo_cli --mode solving --script actions.json
#   python -m apps.cli.demo_cli --puzzle <81 chars> --solution <81 chars> --mode competition

import argparse
import json
import logging
from pathlib import Path

from engine.config import load_engine_config
from engine.oracle import KnownSolutionOracle
from engine.session import GameSession

DEMO_PUZZLE = "53..7....6..195....98....6.8...6...34..8.3..17...2...6.6....28....419..5....8..79"
DEMO_SOLUTION = "534678912672195348198342567859761423426853791713924856961537284287419635345286179"

DEMO_SCRIPT = [
    {"select": [0, 2]},
    {"input": 4},
    {"select": [0, 3]},
    {"note": 6},
    {"input": 6},
    {"move": "right"},
    {"undo": True},
]


def run_action(session: GameSession, action: dict) -> dict:
    """Apply one scripted action; returns a short log entry."""
    if "select" in action:
        session.select(*action["select"])
        return {"select": list(session.selected)}
    if action.get("deselect"):
        session.clear_selection()
        return {"deselect": True}
    if "move" in action:
        session.move_selection(action["move"])
        return {"move": action["move"], "selected": list(session.selected)}
    if "mode" in action:
        session.set_input_mode(action["mode"])
        return {"mode": session.input_mode.value}
    if "input" in action or "note" in action:
        prev = session.input_mode
        session.set_input_mode("note" if "note" in action else "normal")
        digit = action.get("note", action.get("input"))
        result = session.handle_input(digit)
        session.set_input_mode(prev)
        return {
            "digit": digit,
            "changed": result.changed,
            "error_cell": list(result.error_cell) if result.error_cell else None,
            "completed": result.game_completed,
        }
    if action.get("delete"):
        return {"delete": session.handle_delete().changed}
    if action.get("undo"):
        return {"undo": session.undo()}
    raise ValueError(f"unknown action: {action}")


def main(args):
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    config = load_engine_config(args.config)
    session = GameSession(oracle=KnownSolutionOracle(args.solution), config=config)
    session.load_puzzle(args.puzzle)
    starters = {
        "solving": session.start_game,
        "manual": session.start_manual_game,
        "competition": session.start_competition_game,
    }
    if not starters[args.mode]():
        print(json.dumps({"error": session.error_message}, indent=2))
        return 1

    script = DEMO_SCRIPT
    if args.script:
        with open(args.script, encoding="utf-8") as f:
            script = json.load(f)
    log = [run_action(session, a) for a in script]

    payload = {"actions": log, "session": session.snapshot()}
    if args.out:
        out = Path(args.out)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--puzzle", type=str, default=DEMO_PUZZLE)
    ap.add_argument("--solution", type=str, default=DEMO_SOLUTION)
    ap.add_argument("--mode", type=str, default="solving", choices=["solving", "manual", "competition"])
    ap.add_argument("--script", type=str, default=None, help="JSON list of actions")
    ap.add_argument("--config", type=str, default=None)
    ap.add_argument("--out", type=str, default=None)
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args()
    raise SystemExit(main(args))
