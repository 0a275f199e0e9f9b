# training/evolution.py
from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional
import numpy as np

from dense.errors import InvalidArgumentError
from .network import DenseNetwork

logger = logging.getLogger(__name__)

FitnessFn = Callable[[DenseNetwork], float]


@dataclass(frozen=True)
class EvolutionConfig:
    """Knobs for the genetic weight search. Fitness is maximised."""
    population_size: int = 32
    elite_count: int = 2
    tournament_size: int = 3
    # chance that a child is mutated at all; should be a few percent or less
    mutation_probability: float = 0.05
    # given a mutation, chance that any single cell gets a fresh value
    mutation_rate: float = 0.1
    generations: int = 100
    randomize_initial: bool = True
    seed: Optional[int] = None

    def with_(self, **kwargs) -> "EvolutionConfig":
        return replace(self, **kwargs)

    def validate(self) -> None:
        if self.population_size < 2:
            raise InvalidArgumentError(f"population_size must be >= 2, got {self.population_size}")
        if not 0 <= self.elite_count < self.population_size:
            raise InvalidArgumentError(
                f"elite_count must be in [0, {self.population_size}), got {self.elite_count}"
            )
        if self.tournament_size < 1:
            raise InvalidArgumentError(f"tournament_size must be >= 1, got {self.tournament_size}")
        for name in ("mutation_probability", "mutation_rate"):
            v = getattr(self, name)
            if not 0.0 <= v <= 1.0:
                raise InvalidArgumentError(f"{name} must be in [0, 1], got {v}")


class GeneticSearch:
    """
    Evolves a population of same-shaped DenseNetworks with elitism,
    tournament selection, arithmetic crossover and per-cell mutation.

    Operators run single-threaded; nothing else may train the population's
    networks while a generation is being produced.
    """
    def __init__(
        self,
        seed_network: DenseNetwork,
        fitness: FitnessFn,
        cfg: EvolutionConfig = EvolutionConfig(),
        on_generation_end: Optional[Callable[[int, Dict[str, Any]], None]] = None,
    ):
        cfg.validate()
        self.cfg = cfg
        self.fitness = fitness
        self.on_generation_end = on_generation_end
        self.rng = np.random.default_rng(cfg.seed)
        self.generation = 0

        self.population: List[DenseNetwork] = [seed_network.clone() for _ in range(cfg.population_size)]
        self._rebind_rngs()
        if cfg.randomize_initial:
            for member in self.population[1:]:
                member.randomize()
        self.scores = self._evaluate()

    def _rebind_rngs(self) -> None:
        # all genome draws come from the search's generator so a seed reproduces a run
        for net in self.population:
            for layer in net.layers:
                layer.weights.rng = self.rng

    def _evaluate(self) -> np.ndarray:
        return np.array([float(self.fitness(net)) for net in self.population], dtype=np.float64)

    def _tournament(self) -> DenseNetwork:
        k = min(self.cfg.tournament_size, len(self.population))
        picks = self.rng.choice(len(self.population), size=k, replace=False)
        winner = max(picks, key=lambda i: self.scores[i])
        return self.population[int(winner)]

    def best(self) -> DenseNetwork:
        return self.population[int(np.argmax(self.scores))]

    def best_score(self) -> float:
        return float(np.max(self.scores))

    def step(self) -> Dict[str, Any]:
        """Produce and score the next generation. Returns its summary."""
        ranked = np.argsort(-self.scores, kind="stable")
        nxt = [self.population[int(i)].clone() for i in ranked[: self.cfg.elite_count]]

        mutated_cells = 0
        while len(nxt) < self.cfg.population_size:
            mom, dad = self._tournament(), self._tournament()
            child = mom.crossover(dad)
            if self.rng.random() < self.cfg.mutation_probability:
                mutated_cells += child.mutate(self.cfg.mutation_rate)
            nxt.append(child)

        self.population = nxt
        self._rebind_rngs()
        self.scores = self._evaluate()
        self.generation += 1

        summary = {
            "best": float(np.max(self.scores)),
            "mean": float(np.mean(self.scores)),
            "worst": float(np.min(self.scores)),
            "mutated_cells": mutated_cells,
        }
        logger.debug("generation %d best=%.6f mean=%.6f", self.generation, summary["best"], summary["mean"])
        if self.on_generation_end is not None:
            self.on_generation_end(self.generation, summary)
        return summary

    def run(self, generations: Optional[int] = None) -> DenseNetwork:
        n = self.cfg.generations if generations is None else generations
        for _ in range(n):
            self.step()
        logger.info("evolution finished after %d generations, best=%.6f", self.generation, self.best_score())
        return self.best()
