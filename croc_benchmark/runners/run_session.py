"""
Run a session of episodes (v1).

CLI contract:
  python -m croc_benchmark.runners.run_session --config <path> --backend lite --n_episodes 100 [--out <dir>] [--force]

Notes:
  - Deterministic seeds: episode i uses session.seed0 + i.
  - Graph and transition matrix are built once and shared read-only by all episodes.
  - With --out, each episode writes <out>/episode_<iii>/{trace.csv, belief.npy, summary.json}.

Exit codes:
  0 success
  2 config/schema validation error (including an invalid waterhole graph)
  4 backend startup failure
"""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional

from croc_benchmark.backends.base_backend import Backend
from croc_benchmark.backends.lite_backend import LiteBackend
from croc_benchmark.errors import InvalidGraph
from croc_benchmark.graph.waterholes import WaterholeGraph
from croc_benchmark.policies.registry import make_policy
from croc_benchmark.runners.run_episode import run_episode
from croc_benchmark.runners.utils import load_yaml, validate_session_config, ValidationError, ensure_dir, exit_with


BACKENDS = ["lite"]


def make_backend(backend_name: str, sim_params: Dict[str, Any]) -> Backend:
    if backend_name == "lite":
        return LiteBackend(sim_params=sim_params)
    raise ValueError(f"Unknown backend: {backend_name}")


def run_session(
    cfg: Dict[str, Any],
    backend_name: str = "lite",
    out_dir: Optional[str] = None,
    force: bool = False,
    backend: Optional[Backend] = None,
) -> List[Dict[str, Any]]:
    try:
        validate_session_config(cfg, ctx="session_config")
    except ValidationError as e:
        exit_with(2, f"[config validation error] {e}")

    sim_params = cfg["sim_params"]
    tracker_cfg = cfg["tracker"]
    session = cfg["session"]
    policy_name = str(session["policy_name"])
    verbose = int(session.get("verbose", 0)) == 1

    out: Optional[Path] = None
    if out_dir is not None:
        out = Path(out_dir)
        if out.exists() and not force and any(out.glob("episode_*/summary.json")):
            exit_with(2, f"Output dir already contains episodes; use --force to overwrite: {out}")
        ensure_dir(out)

    if backend is None:
        try:
            backend = make_backend(backend_name, sim_params)
        except SystemExit:
            raise
        except Exception as e:
            exit_with(4, f"Backend startup failure: {e}")

    try:
        graph = WaterholeGraph.from_paths(backend.get_graph())
    except InvalidGraph as e:
        exit_with(2, f"[graph validation error] {e}")
    if graph.n != int(sim_params["n_waterholes"]):
        print(f"[WARN] backend graph has {graph.n} waterholes, sim_params.n_waterholes={sim_params['n_waterholes']}")
    transition = graph.transition_matrix()

    policy = make_policy(policy_name, policy_cfg=cfg["policies"][policy_name], sim_params=sim_params)

    n_episodes = int(session["n_episodes"])
    seed0 = int(session.get("seed0", 0))
    print(f"[INFO] session: policy={policy_name} backend={backend_name} episodes={n_episodes} "
          f"waterholes={graph.n} recurrence={tracker_cfg.get('recurrence', 'max_product')}")

    summaries: List[Dict[str, Any]] = []
    for i in range(n_episodes):
        seed = seed0 + i
        ep_dir = None if out is None else str(out / f"episode_{i:03d}")
        summary = run_episode(
            backend,
            graph,
            transition,
            policy,
            tracker_cfg=tracker_cfg,
            seed=seed,
            episode_id=i,
            max_turns=int(sim_params["max_turns"]) + 1,
            out_dir=ep_dir,
            verbose=verbose,
        )
        summaries.append(summary)
        print(f"[INFO] episode {i:03d} seed={seed} stop={summary['stop_reason']} turns={summary['turns']} score={summary['score']}")

    backend.report_results()
    try:
        backend.close()
    except Exception as e:
        print(f"[WARN] backend close failed: {e}")
    return summaries


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", required=True, type=str)
    ap.add_argument("--backend", required=True, choices=BACKENDS)
    ap.add_argument("--n_episodes", required=True, type=int)
    ap.add_argument("--out", default=None, type=str)
    ap.add_argument("--force", action="store_true")
    args = ap.parse_args()

    try:
        cfg = load_yaml(args.config)
        validate_session_config(cfg, ctx="session_config", n_episodes_cli=args.n_episodes)
    except ValidationError as e:
        exit_with(2, f"[config validation error] {e}")

    run_session(cfg, backend_name=args.backend, out_dir=args.out, force=args.force)


if __name__ == "__main__":
    main()
