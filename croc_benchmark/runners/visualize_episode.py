"""Visualize one episode (v1): belief heatmap over turns x waterholes.

Layers:
- belief.npy as an image (rows = turns, columns = waterhole ids 1..N)
- player location per turn (white line)
- MAP estimate per turn (cyan dots)
- reveal events (red X)

Usage:
  python -m croc_benchmark.runners.visualize_episode --episode_dir results/run/episode_000 --out results/_ep000.png
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from croc_benchmark.runners.utils import read_json, exit_with


def plot_episode(episode_dir: str, out_path: str, title: Optional[str] = None, dpi: int = 150) -> str:
    d = Path(episode_dir)
    belief_p = d / "belief.npy"
    trace_p = d / "trace.csv"
    if not belief_p.exists() or not trace_p.exists():
        raise FileNotFoundError(f"episode dir must contain belief.npy and trace.csv: {d}")

    belief = np.load(str(belief_p))
    trace = pd.read_csv(trace_p)
    summary = read_json(str(d / "summary.json")) if (d / "summary.json").exists() else {}

    n_turns = int(belief.shape[0])
    n = int(belief.shape[1]) if belief.ndim == 2 else 0

    fig, ax = plt.subplots(figsize=(max(6.0, 0.25 * n + 2.0), max(3.0, 0.2 * n_turns + 1.5)))
    if n_turns > 0:
        im = ax.imshow(
            belief,
            aspect="auto",
            origin="upper",
            cmap="magma",
            extent=(0.5, n + 0.5, n_turns - 0.5, -0.5),
            vmin=0.0,
            vmax=max(1e-9, float(np.max(belief))),
        )
        fig.colorbar(im, ax=ax, label="P(croc at waterhole)")

    if len(trace) > 0:
        turns = trace["turn"].to_numpy(dtype=float)
        ax.plot(trace["player_location"].to_numpy(dtype=float), turns, color="white", lw=1.5, label="player")
        ax.scatter(trace["map_location"].to_numpy(dtype=float), turns, s=12, color="cyan", label="MAP")
        rev = pd.to_numeric(trace["revealed_location"], errors="coerce")
        ok = rev.notna().to_numpy()
        if np.any(ok):
            ax.scatter(rev.to_numpy(dtype=float)[ok], turns[ok], marker="x", s=60, color="red", label="reveal")
        ax.legend(loc="lower right", fontsize=8)

    ax.set_xlabel("waterhole")
    ax.set_ylabel("turn")
    if title is None:
        title = f"episode {summary.get('episode', '?')} | {summary.get('policy_name', '')} | stop={summary.get('stop_reason', '')}"
    ax.set_title(title)

    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(str(out), dpi=int(dpi))
    plt.close(fig)
    return str(out)


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--episode_dir", required=True, type=str)
    ap.add_argument("--out", required=True, type=str)
    ap.add_argument("--dpi", default=150, type=int)
    args = ap.parse_args()

    try:
        out = plot_episode(args.episode_dir, args.out, dpi=args.dpi)
    except FileNotFoundError as e:
        exit_with(2, str(e))
    print(f"[INFO] wrote {out}")


if __name__ == "__main__":
    main()
