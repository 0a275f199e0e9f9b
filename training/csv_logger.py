# training/csv_logger.py
from __future__ import annotations
import csv, os
from typing import Any, Callable, Dict, Optional, Protocol

TRAIN_KEYS = [
    "step",
    "train/loss", "train/loss_ema", "train/loss_mean", "train/loss_max", "train/lr",
    "epoch", "epoch/loss_mean",
]

EVO_KEYS = [
    "step",
    "gen/best", "gen/mean", "gen/worst", "gen/mutated_cells",
]

class MetricsLogger(Protocol):
    def log(self, step: int, scalars: Dict[str, Any]) -> None: ...
    def flush(self) -> None: ...
    def close(self) -> None: ...


class CSVLogger:
    """Append-only CSV logger with header auto-discovery or predefined schema."""
    def __init__(self, path: str, fieldnames: list[str] | None = None):
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        self.path = path
        self._fieldnames = fieldnames
        self._file = open(path, "a", newline="")
        self._writer: Optional[csv.DictWriter] = None

    def log(self, step: int, scalars: Dict[str, Any]) -> None:
        row = {"step": step, **scalars}
        if self._writer is None:
            if self._fieldnames is None:
                self._fieldnames = list(row.keys())
            self._writer = csv.DictWriter(
                self._file,
                fieldnames=self._fieldnames,
                extrasaction="ignore",   # unseen keys are dropped, not fatal
            )
            if self._file.tell() == 0:
                self._writer.writeheader()
        self._writer.writerow(row)

    def flush(self) -> None:
        self._file.flush()

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()

    def __enter__(self) -> "CSVLogger":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def make_step_logger(
    logger: MetricsLogger,
    log_every_steps: int = 100,
) -> Callable[[Dict[str, Any]], None]:
    """
    Returns a function(stats) -> None that writes per-sample training scalars
    every `log_every_steps` steps. Keeps the logging cadence out of the trainer.
    """
    every = max(1, int(log_every_steps))

    def _on_step_log(stats: Dict[str, Any]) -> None:
        step = stats.get("step")
        if step is None or int(step) % every != 0:
            return
        scalars = {
            "train/loss": stats.get("loss"),
            "train/loss_ema": stats.get("loss_ema"),
            "train/loss_mean": stats.get("loss_mean"),
            "train/loss_max": stats.get("loss_max"),
            "train/lr": stats.get("lr"),
        }
        logger.log(int(step), scalars)
    return _on_step_log


def make_epoch_logger(
    *,
    logger: MetricsLogger,
    step_getter: Callable[[], int],
    on_best: Optional[Callable[[int, float], None]] = None,
) -> Callable[[int, Dict[str, Any]], None]:
    """
    Returns a function(epoch, summary) -> None that logs the epoch mean loss,
    flushes, and calls `on_best(epoch, loss)` whenever the loss improves.
    """
    best = [float("inf")]

    def _on_epoch_end(epoch: int, s: Dict[str, Any]) -> None:
        loss = float(s["loss_mean"])
        logger.log(int(step_getter()), {"epoch": epoch, "epoch/loss_mean": loss})
        logger.flush()
        if on_best is not None and loss < best[0]:
            best[0] = loss
            on_best(epoch, loss)
    return _on_epoch_end


def make_generation_logger(logger: MetricsLogger) -> Callable[[int, Dict[str, Any]], None]:
    def _on_generation_end(gen: int, s: Dict[str, Any]) -> None:
        logger.log(gen, {
            "gen/best": s.get("best"),
            "gen/mean": s.get("mean"),
            "gen/worst": s.get("worst"),
            "gen/mutated_cells": s.get("mutated_cells"),
        })
        logger.flush()
    return _on_generation_end
