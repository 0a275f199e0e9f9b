# training/plots.py
from __future__ import annotations
import csv
import math
from collections import deque
from pathlib import Path
from typing import Dict, List

# Use a non-interactive backend that writes to files
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402


def to_float(v) -> float:
    try:
        return float(v)
    except (TypeError, ValueError):
        return math.nan


def rolling_mean(xs, window: int) -> List[float]:
    """NaN samples (rows from another writer, e.g. epoch rows) stay out of the window and map to NaN."""
    out, q, s = [], deque(), 0.0
    for x in xs:
        x = float(x)
        if math.isnan(x):
            out.append(math.nan)
            continue
        q.append(x); s += x
        if len(q) > window:
            s -= q.popleft()
        out.append(s / len(q))
    return out


def read_log(log_path: Path) -> Dict[str, List[float]]:
    """Column-wise view of a CSVLogger file; blanks become NaN."""
    cols: Dict[str, List[float]] = {}
    with Path(log_path).open(newline="") as f:
        r = csv.DictReader(f)
        names = r.fieldnames or []
        for name in names:
            cols[name] = []
        for row in r:
            for name in names:
                cols[name].append(to_float(row.get(name)))
    if not cols or not cols.get("step"):
        raise RuntimeError(f"{log_path} has no rows. Run training first.")
    return cols


def _savefig(fig, out_dir: Path, name: str) -> Path:
    path = out_dir / name
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return path


def plot_training_log(log_path, out_dir=None, window: int = 100) -> List[Path]:
    """
    Render loss curves from a backprop log (train/*, epoch/* columns) and/or
    fitness curves from an evolution log (gen/* columns). Returns written files.
    """
    log_path = Path(log_path)
    out_dir = Path(out_dir) if out_dir is not None else log_path.parent / "plots"
    out_dir.mkdir(parents=True, exist_ok=True)
    cols = read_log(log_path)
    steps = cols["step"]
    written: List[Path] = []

    if "train/loss" in cols:
        # epoch rows share the file and leave train/* blank
        rows = [i for i, v in enumerate(cols["train/loss"]) if not math.isnan(v)]
        xs = [steps[i] for i in rows]
        loss = [cols["train/loss"][i] for i in rows]
        fig = plt.figure(figsize=(10, 5))
        plt.plot(xs, loss, linewidth=1, alpha=0.5, label="raw")
        if "train/loss_ema" in cols:
            plt.plot(xs, [cols["train/loss_ema"][i] for i in rows], linewidth=2, label="EMA")
        plt.plot(xs, rolling_mean(loss, window), linewidth=2, label=f"mean@{window}")
        plt.title("Train Loss"); plt.xlabel("step"); plt.ylabel("loss"); plt.legend()
        written.append(_savefig(fig, out_dir, "train_loss.png"))

    if "epoch/loss_mean" in cols:
        pts = [(e, v) for e, v in zip(cols.get("epoch", []), cols["epoch/loss_mean"]) if not math.isnan(v)]
        if pts:
            fig = plt.figure(figsize=(10, 5))
            plt.plot([p[0] for p in pts], [p[1] for p in pts], marker="o", linewidth=2)
            plt.title("Epoch Loss"); plt.xlabel("epoch"); plt.ylabel("mean loss")
            written.append(_savefig(fig, out_dir, "epoch_loss.png"))

    if "gen/best" in cols:
        fig = plt.figure(figsize=(10, 5))
        plt.plot(steps, cols["gen/best"], linewidth=2, label="best")
        plt.plot(steps, cols["gen/mean"], linewidth=2, label="mean")
        plt.plot(steps, cols["gen/worst"], linewidth=1, alpha=0.6, label="worst")
        plt.title("Fitness per Generation"); plt.xlabel("generation"); plt.ylabel("fitness"); plt.legend()
        written.append(_savefig(fig, out_dir, "fitness.png"))

    return written
