"""
Run a single episode (v1).

Turn loop:
  snapshot -> (reveal | emission) -> BeliefTracker.update -> policy.step -> submit_moves

Snapshot ids are converted to 0-based indices on the way in and moves back to
1-based strings on the way out; nothing else in the loop sees 1-based ids.

Any CrocBenchmarkError ends this episode only. It is logged with the turn
number and reported through summary["stop_reason"] / summary["error"].
"""
from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

from croc_benchmark.backends.base_backend import Backend, SEARCH_MOVE
from croc_benchmark.belief.tracker import BeliefTracker
from croc_benchmark.errors import CrocBenchmarkError, DegenerateBelief, InvalidDistributions, InvalidLocation, NoPathFound
from croc_benchmark.graph.waterholes import WaterholeGraph
from croc_benchmark.policies.base_policy import Policy, SEARCH, Move
from croc_benchmark.runners.utils import ensure_dir, write_json, write_trace_csv, TRACE_COLUMNS_V1
from croc_benchmark.sensor.emission import make_sensor_model


def decode_snapshot(raw: Dict[str, Any], graph: WaterholeGraph) -> Dict[str, Any]:
    """Collaborator snapshot -> 0-based view used by tracker and policy."""
    revealed: Optional[int] = None
    for key in ("backpacker1", "backpacker2"):
        status = int(raw.get(key, 0))
        if status < 0:
            revealed = graph.index_of(-status)
            break
    return {
        "score": int(raw.get("score", 0)),
        "player_index": graph.index_of(raw["player_location"]),
        "revealed_index": revealed,
        "reading": (float(raw["calcium"]), float(raw["salinity"]), float(raw["alkalinity"])),
        "backpacker1": int(raw.get("backpacker1", 0)),
        "backpacker2": int(raw.get("backpacker2", 0)),
    }


def encode_move(move: Move, graph: WaterholeGraph) -> str:
    if move == SEARCH:
        return SEARCH_MOVE
    return str(graph.location_of(int(move)))


def _stop_reason_for(err: CrocBenchmarkError) -> str:
    if isinstance(err, NoPathFound):
        return "no_path_found"
    if isinstance(err, InvalidLocation):
        return "invalid_location"
    if isinstance(err, InvalidDistributions):
        return "invalid_distributions"
    if isinstance(err, DegenerateBelief):
        return "degenerate_belief"
    return "core_error"


def run_episode(
    backend: Backend,
    graph: WaterholeGraph,
    transition: np.ndarray,
    policy: Policy,
    tracker_cfg: Dict[str, Any],
    seed: int,
    episode_id: int = 0,
    max_turns: Optional[int] = None,
    out_dir: Optional[str] = None,
    verbose: bool = False,
) -> Dict[str, Any]:
    backend.start_episode(seed=int(seed))
    emission_mode = str(tracker_cfg.get("emission_mode", "inverse_deviation"))
    tracker = BeliefTracker(transition, recurrence=str(tracker_cfg.get("recurrence", "max_product")))
    policy.reset(seed=int(seed), episode_spec={"graph": graph, "episode": int(episode_id)})

    rows: List[Dict[str, Any]] = []
    beliefs: List[np.ndarray] = []
    stop_reason: Optional[str] = None
    error: Optional[str] = None
    score = 0
    turn = 0
    wallclock_t0 = time.perf_counter()

    try:
        sensor = make_sensor_model(backend.get_distributions(), mode=emission_mode)
        if sensor.N != graph.n:
            raise InvalidDistributions(f"distributions cover {sensor.N} waterholes, graph has {graph.n}")

        while True:
            if max_turns is not None and turn >= int(max_turns):
                stop_reason = "turn_limit"
                break

            raw = backend.get_snapshot()
            snap = decode_snapshot(raw, graph)
            score = snap["score"]

            _it0 = time.perf_counter()
            if snap["revealed_index"] is not None:
                belief_summary = tracker.update(turn, revealed=snap["revealed_index"])
            else:
                emission = sensor.emission_probabilities(snap["reading"])
                belief_summary = tracker.update(turn, emission=emission)
            inference_ms = float((time.perf_counter() - _it0) * 1000.0)
            policy.record_inference_ms(inference_ms)
            beliefs.append(tracker.P.copy())

            _pt0 = time.perf_counter()
            action = policy.step(turn, snap, belief_summary)
            planning_ms = float((time.perf_counter() - _pt0) * 1000.0)
            moves = tuple(action["moves"])
            if len(moves) != 2:
                raise ValueError(f"policy {policy.name} returned {len(moves)} moves, expected 2")
            move1, move2 = encode_move(moves[0], graph), encode_move(moves[1], graph)

            if verbose:
                print(f"[DEBUG] ep={episode_id} turn={turn} player={snap['player_index'] + 1} "
                      f"map={belief_summary['map_index'] + 1} p={belief_summary['map_probability']:.3f} moves={move1},{move2}")

            continues, score = backend.submit_moves(move1, move2)

            target = action.get("target", None)
            rows.append({
                "turn": int(turn),
                "score": int(score),
                "player_location": snap["player_index"] + 1,
                "backpacker1": snap["backpacker1"],
                "backpacker2": snap["backpacker2"],
                "calcium": snap["reading"][0],
                "salinity": snap["reading"][1],
                "alkalinity": snap["reading"][2],
                "revealed_location": "" if snap["revealed_index"] is None else snap["revealed_index"] + 1,
                "map_location": belief_summary["map_index"] + 1,
                "map_probability": belief_summary["map_probability"],
                "entropy": belief_summary["entropy"],
                "degenerate": belief_summary["degenerate"],
                "target_location": "" if target is None else int(target) + 1,
                "path_len": len(action.get("path", [])),
                "move1": move1,
                "move2": move2,
                "selected_action_id": str(action.get("action_id", "na")),
                "inference_ms": inference_ms,
                "planning_ms": planning_ms,
            })

            if not continues:
                outcome = backend.episode_outcome()
                stop_reason = "croc_found" if outcome.get("found", False) else "backend_ended"
                break
            turn += 1
    except CrocBenchmarkError as e:
        print(f"[ERROR] episode {episode_id} turn {turn}: {type(e).__name__}: {e}")
        stop_reason = _stop_reason_for(e)
        error = f"{type(e).__name__}: {e}"

    wallclock_s = float(time.perf_counter() - wallclock_t0)
    stats = policy.get_budget_stats()
    summary = {
        "version": "v1",
        "episode": int(episode_id),
        "seed": int(seed),
        "policy_name": policy.name,
        "found": int(stop_reason == "croc_found"),
        "turns": int(len(rows)),
        "score": int(score),
        "stop_reason": stop_reason,
        "error": error,
        "degenerate_count": int(tracker.degenerate_count),
        "recurrence": tracker.recurrence,
        "emission_mode": emission_mode,
        "inference_ms_mean": float(stats["inference_ms_mean"]),
        "planning_ms_mean": float(stats["planning_ms_mean"]),
        "wallclock_s": wallclock_s,
    }

    if out_dir is not None:
        out = Path(out_dir)
        ensure_dir(out)
        write_trace_csv(str(out / "trace.csv"), rows, TRACE_COLUMNS_V1)
        belief_arr = np.stack(beliefs, axis=0) if beliefs else np.zeros((0, graph.n), dtype=np.float64)
        np.save(str(out / "belief.npy"), belief_arr)
        write_json(str(out / "summary.json"), summary)

    return summary
