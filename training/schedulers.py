# training/schedulers.py
from __future__ import annotations
from typing import Protocol

class RateScheduler(Protocol):
    def value(self, global_step: int) -> float: ...

class ConstantRate(RateScheduler):
    def __init__(self, rate: float):
        self.rate = rate
    def value(self, global_step: int) -> float:
        return self.rate

class LinearDecayRate(RateScheduler):
    """Linear ramp from start to end over `steps`, then flat."""
    def __init__(self, start: float, end: float, steps: int):
        self.start = start; self.end = end; self.steps = max(1, steps)
    def value(self, global_step: int) -> float:
        t = min(global_step, self.steps)
        return self.start + (self.end - self.start) * (t / self.steps)

def make_lr_scheduler(lr: float, lr_end: float | None, decay_steps: int) -> RateScheduler:
    if lr_end is None:
        return ConstantRate(lr)
    return LinearDecayRate(lr, lr_end, decay_steps)
