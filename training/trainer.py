# training/trainer.py
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
import numpy as np

from config import AppConfig
from core.interfaces import ReductionExecutor
from core.parallel import SerialExecutor, make_executor
from .csv_logger import CSVLogger, TRAIN_KEYS, make_epoch_logger, make_step_logger
from .metrics import LossTracker
from .network import DenseNetwork
from .schedulers import RateScheduler, make_lr_scheduler

logger = logging.getLogger(__name__)

Sample = Tuple[Sequence[float], Sequence[float]]
LogFn = Callable[[Dict[str, Any]], None]


@dataclass
class TrainHooks:
    on_step_log: Optional[LogFn] = None
    on_epoch_end: Optional[Callable[[int, Dict[str, Any]], None]] = None


class BackpropTrainer:
    """
    Thin, testable loop coordinator: one forward-then-backward cycle per
    sample, strictly sequential. The reduction executor is supplied by the
    caller (who owns its lifetime); the trainer never creates a pool.
    """
    def __init__(
        self,
        network: DenseNetwork,
        cfg: AppConfig = AppConfig(),
        executor: Optional[ReductionExecutor] = None,
        hooks: Optional[TrainHooks] = None,
        lr_scheduler: Optional[RateScheduler] = None,
    ):
        self.network = network
        self.cfg = cfg
        self.executor = executor if executor is not None else SerialExecutor()
        self.hooks = hooks or TrainHooks()
        self.lr_sched = lr_scheduler or make_lr_scheduler(cfg.lr, cfg.lr_end, cfg.lr_decay_steps)
        self.losses = LossTracker(cfg.loss_ema_alpha, cfg.loss_window)
        self.rng = np.random.default_rng(cfg.seed)
        self.global_step = 0

    def train_epoch(self, samples: Sequence[Sample]) -> float:
        order = np.arange(len(samples))
        if self.cfg.shuffle:
            self.rng.shuffle(order)
        for idx in order:
            x, y = samples[int(idx)]
            lr = self.lr_sched.value(self.global_step)
            loss = self.network.train_sample(x, y, lr, self.executor)
            self.losses.add(loss)
            self.global_step += 1
            if self.hooks.on_step_log is not None:
                self.hooks.on_step_log({"step": self.global_step, "loss": loss, "lr": lr,
                                        **_strip_prefix(self.losses.scalars())})
        return self.losses.end_epoch()

    def fit(self, samples: Sequence[Sample], epochs: Optional[int] = None) -> List[float]:
        """Run `epochs` passes (default cfg.epochs); returns the mean loss of each epoch."""
        if not samples:
            raise ValueError("fit() needs at least one sample")
        n_epochs = self.cfg.epochs if epochs is None else epochs
        history: List[float] = []
        for ep in range(n_epochs):
            mean = self.train_epoch(samples)
            history.append(mean)
            logger.info("epoch %d/%d loss=%.6f step=%d", ep + 1, n_epochs, mean, self.global_step)
            if self.hooks.on_epoch_end is not None:
                self.hooks.on_epoch_end(ep, {"loss_mean": mean, "step": self.global_step})
        return history

    def evaluate(self, samples: Sequence[Sample]) -> float:
        """Mean squared-error loss without touching the weights."""
        total = 0.0
        for x, y in samples:
            err = self.network.forward(x) - np.asarray(y, dtype=np.float64)
            total += float(0.5 * np.sum(err * err))
        return total / max(1, len(samples))


def _strip_prefix(scalars: Dict[str, float]) -> Dict[str, float]:
    return {k.split("/", 1)[-1]: v for k, v in scalars.items()}


def make_csv_hooks(cfg: AppConfig, trainer_step: Callable[[], int],
                   filename: str = "train_log.csv") -> Tuple[TrainHooks, Optional[CSVLogger]]:
    """Wire a CSVLogger into TrainHooks when cfg.log_dir is set. Caller closes the logger."""
    if cfg.log_dir is None:
        return TrainHooks(), None
    csv_logger = CSVLogger(os.path.join(cfg.log_dir, filename), fieldnames=TRAIN_KEYS)
    hooks = TrainHooks(
        on_step_log=make_step_logger(csv_logger, cfg.log_every_steps),
        on_epoch_end=make_epoch_logger(logger=csv_logger, step_getter=trainer_step),
    )
    return hooks, csv_logger


def executor_from_config(cfg: AppConfig):
    """Pool or serial executor per cfg; the caller owns it and must close it."""
    return make_executor(cfg.parallel_backprop, cfg.pool_workers, cfg.pool_timeout_sec)
