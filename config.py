# config.py
from dataclasses import dataclass, replace
from typing import Optional

@dataclass(frozen=True, slots=True)
class AppConfig:
    # shared / global
    seed: Optional[int] = None

    # backward-pass worker pool
    parallel_backprop: bool = True
    pool_workers: int = 48
    pool_timeout_sec: Optional[float] = None

    # backprop training
    epochs: int = 50
    lr: float = 0.05
    lr_end: Optional[float] = None       # None = constant learning rate
    lr_decay_steps: int = 10_000
    shuffle: bool = True

    # layer construction
    activation: str = "sigmoid"
    weight_init: str = "xavier"          # "xavier" | "uniform"

    # logging
    log_dir: Optional[str] = None        # None = no CSV log
    log_every_steps: int = 100
    loss_ema_alpha: float = 0.05
    loss_window: int = 100

    def with_(self, **kwargs) -> "AppConfig":
        """Convenience: clone with updated values"""
        return replace(self, **kwargs)
