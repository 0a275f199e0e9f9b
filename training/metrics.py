# training/metrics.py
from __future__ import annotations
from collections import deque
from typing import Deque, Dict, Optional

class EMA:
    """Exponential moving average; first sample seeds the value."""
    def __init__(self, alpha: float):
        if not 0.0 < alpha <= 1.0:
            raise ValueError(f"EMA alpha must be in (0, 1], got {alpha}")
        self.alpha = alpha
        self.value: Optional[float] = None
    def update(self, x: float) -> float:
        x = float(x)
        self.value = x if self.value is None else (self.alpha * x + (1 - self.alpha) * self.value)
        return self.value

class WindowedStat:
    """Mean/min/max over the last `window` samples."""
    def __init__(self, window: int):
        self.window = window
        self.buf: Deque[float] = deque(maxlen=window)
    def __len__(self) -> int:
        return len(self.buf)
    def add(self, x: float) -> None:
        self.buf.append(float(x))
    def summary(self) -> Dict[str, float]:
        if not self.buf:
            return {"mean": 0.0, "min": 0.0, "max": 0.0}
        b = list(self.buf)
        return {"mean": sum(b) / len(b), "min": min(b), "max": max(b)}

class LossTracker:
    """Per-sample loss bookkeeping for the trainer: EMA, rolling window and epoch totals."""
    def __init__(self, ema_alpha: float = 0.05, window: int = 100):
        self.ema = EMA(ema_alpha)
        self.window = WindowedStat(window)
        self._epoch_sum = 0.0
        self._epoch_n = 0

    def add(self, loss: float) -> None:
        self.ema.update(loss)
        self.window.add(loss)
        self._epoch_sum += float(loss)
        self._epoch_n += 1

    def end_epoch(self) -> float:
        """Mean loss of the epoch just finished; resets the epoch totals."""
        mean = self._epoch_sum / self._epoch_n if self._epoch_n else 0.0
        self._epoch_sum, self._epoch_n = 0.0, 0
        return mean

    def scalars(self) -> Dict[str, float]:
        w = self.window.summary()
        return {
            "train/loss_ema": self.ema.value if self.ema.value is not None else 0.0,
            "train/loss_mean": w["mean"],
            "train/loss_max": w["max"],
        }
