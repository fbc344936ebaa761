"""
croc_benchmark.runners.utils

Runner utility surface used by run_episode.py and run_session.py.

Notes
- Configs are JSON-style YAML (valid JSON); parse with stdlib json (no PyYAML dependency).
- Provides CSV/JSON writers for the optional per-episode trace.
"""

from __future__ import annotations

import csv
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from croc_benchmark.belief.tracker import RECURRENCES
from croc_benchmark.sensor.emission import EMISSION_MODES


# Trace CSV columns (v1 contract; exact order)
TRACE_COLUMNS_V1 = [
    "turn",
    "score",
    "player_location",
    "backpacker1",
    "backpacker2",
    "calcium",
    "salinity",
    "alkalinity",
    "revealed_location",
    "map_location",
    "map_probability",
    "entropy",
    "degenerate",
    "target_location",
    "path_len",
    "move1",
    "move2",
    "selected_action_id",
    "inference_ms",
    "planning_ms",
]


class ValidationError(Exception):
    pass


def exit_with(code: int, msg: str) -> None:
    sys.stderr.write(str(msg).rstrip() + "\n")
    raise SystemExit(int(code))


def ensure_dir(path: os.PathLike | str) -> None:
    Path(path).mkdir(parents=True, exist_ok=True)


def read_json(path: str) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def write_json(path: str, obj: Any) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(obj, indent=2), encoding="utf-8")


def load_yaml(path: str) -> Dict[str, Any]:
    """
    Load a JSON-compatible YAML config. Session configs are written in JSON syntax.
    """
    p = Path(path)
    text = p.read_text(encoding="utf-8")
    if text.startswith("\ufeff"):
        text = text.lstrip("\ufeff")
    try:
        cfg = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Config parse error (expected JSON-style YAML). File={path}. {e}") from e
    if isinstance(cfg, dict):
        cfg["__config_path__"] = str(p)
    return cfg


def _check_ranges(ranges: Any, ctx: str) -> None:
    if not isinstance(ranges, list) or len(ranges) != 3:
        raise ValidationError(f"{ctx} must be a list of 3 [lo, hi] pairs")
    for r in ranges:
        if not isinstance(r, (list, tuple)) or len(r) != 2:
            raise ValidationError(f"{ctx} entries must be [lo, hi] pairs, got {r!r}")
        if float(r[0]) > float(r[1]):
            raise ValidationError(f"{ctx} entry {r!r} has lo > hi")


def validate_session_config(cfg: Dict[str, Any], ctx: str = "session_config", n_episodes_cli: Optional[int] = None) -> None:
    if not isinstance(cfg, dict):
        raise ValidationError(f"{ctx}: config must be a dict")
    for k in ["version", "sim_params", "tracker", "session", "policies"]:
        if k not in cfg:
            raise ValidationError(f"{ctx}: missing required key '{k}'")
    if str(cfg.get("version")) != "v1":
        raise ValidationError(f"{ctx}: version must be 'v1'")

    sim = cfg["sim_params"]
    if not isinstance(sim, dict):
        raise ValidationError(f"{ctx}:sim_params must be a dict")
    for k in ["n_waterholes", "graph_seed", "max_turns"]:
        if k not in sim:
            raise ValidationError(f"{ctx}:sim_params: missing required key '{k}'")
    if int(sim["n_waterholes"]) < 2:
        raise ValidationError(f"{ctx}:sim_params.n_waterholes must be >= 2")
    if int(sim["max_turns"]) < 1:
        raise ValidationError(f"{ctx}:sim_params.max_turns must be >= 1")
    sensor = sim.get("sensor", {}) or {}
    if not isinstance(sensor, dict):
        raise ValidationError(f"{ctx}:sim_params.sensor must be a dict")
    for k in ["mean_range", "spread_range"]:
        if k in sensor:
            _check_ranges(sensor[k], f"{ctx}:sim_params.sensor.{k}")

    tracker = cfg["tracker"]
    if not isinstance(tracker, dict):
        raise ValidationError(f"{ctx}:tracker must be a dict")
    if str(tracker.get("recurrence", "max_product")) not in RECURRENCES:
        raise ValidationError(f"{ctx}:tracker.recurrence must be one of {list(RECURRENCES)}")
    if str(tracker.get("emission_mode", "inverse_deviation")) not in EMISSION_MODES:
        raise ValidationError(f"{ctx}:tracker.emission_mode must be one of {list(EMISSION_MODES)}")

    session = cfg["session"]
    if not isinstance(session, dict):
        raise ValidationError(f"{ctx}:session must be a dict")
    for k in ["n_episodes", "seed0", "policy_name"]:
        if k not in session:
            raise ValidationError(f"{ctx}:session: missing required key '{k}'")
    if int(session["n_episodes"]) < 1:
        raise ValidationError(f"{ctx}:session.n_episodes must be >= 1")
    if n_episodes_cli is not None and int(n_episodes_cli) != int(session["n_episodes"]):
        raise ValidationError(f"{ctx}:--n_episodes {n_episodes_cli} must equal session.n_episodes ({session['n_episodes']})")

    if not isinstance(cfg["policies"], dict):
        raise ValidationError(f"{ctx}:policies must be a dict")
    if str(session["policy_name"]) not in cfg["policies"]:
        raise ValidationError(f"{ctx}:policies missing entry for '{session['policy_name']}'")


def write_trace_csv(path: str, rows: Sequence[Dict[str, Any]], columns: Optional[List[str]] = None) -> None:
    """trace.csv writer; columns default to TRACE_COLUMNS_V1, missing keys are left blank."""
    if columns is None:
        columns = TRACE_COLUMNS_V1
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(list(columns))
        for r in rows:
            w.writerow([r.get(c, "") for c in columns])
