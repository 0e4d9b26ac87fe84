"""
Popularity Samplers.

Pick an index from a population of existing entities, skewed by a
concentration parameter:
- high concentration: close to uniform
- low concentration: a few "hot" indices take most of the picks

Samplers keep no state besides their seeded random source, so two samplers
built with the same seed return the same index sequence.
"""

from abc import ABC, abstractmethod
from functools import lru_cache

import numpy as np

from mdbench.core.errors import EmptyPopulation


class PopularitySampler(ABC):
    """Strategy for choosing an index in ``range(population_size)``."""

    name: str = "sampler"

    def __init__(self, seed: int | None = None):
        self._rng = np.random.default_rng(seed)

    def sample(self, population_size: int, concentration: float) -> int:
        """
        Draw one index.

        Args:
            population_size: Number of candidates
            concentration: Skew parameter, must be positive

        Returns:
            Index in ``[0, population_size)``

        Raises:
            EmptyPopulation: population_size is zero or negative
        """
        if population_size <= 0:
            raise EmptyPopulation(population_size)
        if concentration <= 0:
            raise ValueError(f"concentration must be positive, got {concentration}")
        return self._sample(population_size, concentration)

    @abstractmethod
    def _sample(self, population_size: int, concentration: float) -> int:
        pass


class UniformPopularitySampler(PopularitySampler):
    """Every index is equally likely; concentration is ignored."""

    name = "uniform"

    def _sample(self, population_size: int, concentration: float) -> int:
        return int(self._rng.integers(population_size))


@lru_cache(maxsize=256)
def zipf_cumulative_weights(population_size: int, concentration: float) -> np.ndarray:
    """Cumulative weights where rank r weighs (r + 1) ** (-1 / concentration)."""
    ranks = np.arange(1, population_size + 1, dtype=np.float64)
    cdf = np.cumsum(ranks ** (-1.0 / concentration))
    # Shared through the cache
    cdf.setflags(write=False)
    return cdf


class ZipfPopularitySampler(PopularitySampler):
    """
    Power-law popularity over ranks.

    Lower indices are the popular ones. As concentration grows the exponent
    tends to zero and the distribution flattens toward uniform.
    """

    name = "zipf"

    def _sample(self, population_size: int, concentration: float) -> int:
        cumulative = zipf_cumulative_weights(population_size, concentration)
        point = self._rng.random() * cumulative[-1]
        index = int(np.searchsorted(cumulative, point, side="right"))
        return min(index, population_size - 1)


SAMPLERS: dict[str, type[PopularitySampler]] = {
    UniformPopularitySampler.name: UniformPopularitySampler,
    ZipfPopularitySampler.name: ZipfPopularitySampler,
}


def create_sampler(name: str = "zipf", seed: int | None = None) -> PopularitySampler:
    """Create a sampler by name."""
    try:
        sampler_cls = SAMPLERS[name]
    except KeyError:
        raise ValueError(f"Unknown sampler '{name}', expected one of {sorted(SAMPLERS)}") from None
    return sampler_cls(seed=seed)
