"""
Unit Tests for Popularity Samplers.
"""

from collections import Counter

import numpy as np
import pytest

from mdbench.benchmark.sampler import (
    UniformPopularitySampler,
    ZipfPopularitySampler,
    create_sampler,
    zipf_cumulative_weights,
)
from mdbench.core.errors import EmptyPopulation


def draw(sampler, population_size: int, concentration: float, n: int) -> Counter:
    return Counter(sampler.sample(population_size, concentration) for _ in range(n))


class TestZipfPopularitySampler:
    """Test cases for ZipfPopularitySampler."""

    @pytest.mark.parametrize("population_size", [0, -1])
    def test_empty_population_raises(self, population_size: int) -> None:
        """Test that sampling from nothing fails instead of returning an index."""
        sampler = ZipfPopularitySampler(seed=0)

        with pytest.raises(EmptyPopulation) as exc_info:
            sampler.sample(population_size, 1.0)

        assert exc_info.value.population_size == population_size

    @pytest.mark.parametrize("concentration", [0.0, -2.5])
    def test_non_positive_concentration_raises(self, concentration: float) -> None:
        sampler = ZipfPopularitySampler(seed=0)

        with pytest.raises(ValueError):
            sampler.sample(10, concentration)

    def test_indices_in_range(self) -> None:
        sampler = ZipfPopularitySampler(seed=0)

        counts = draw(sampler, 7, 0.3, 2000)

        assert set(counts) <= set(range(7))

    def test_single_candidate(self) -> None:
        sampler = ZipfPopularitySampler(seed=0)

        assert all(sampler.sample(1, 0.01) == 0 for _ in range(50))

    def test_same_seed_same_sequence(self) -> None:
        """Test reproducibility under a fixed seed."""
        first = ZipfPopularitySampler(seed=1234)
        second = ZipfPopularitySampler(seed=1234)

        assert [first.sample(100, 1.0) for _ in range(200)] == [
            second.sample(100, 1.0) for _ in range(200)
        ]

    def test_low_concentration_is_skewed(self) -> None:
        """Test that low concentration lets one index dominate."""
        counts = draw(ZipfPopularitySampler(seed=5), 100, 0.2, 2000)

        _, top_count = counts.most_common(1)[0]
        assert top_count / 2000 > 0.5

    def test_high_concentration_is_near_uniform(self) -> None:
        counts = draw(ZipfPopularitySampler(seed=5), 100, 1000.0, 2000)

        _, top_count = counts.most_common(1)[0]
        assert top_count / 2000 < 0.05
        assert len(counts) > 90

    def test_skew_decreases_as_concentration_grows(self) -> None:
        """Test the monotonic relation between concentration and skew."""
        shares = []
        for concentration in [0.2, 0.5, 1.0, 10.0]:
            counts = draw(ZipfPopularitySampler(seed=11), 100, concentration, 5000)
            top_five = sum(count for _, count in counts.most_common(5))
            shares.append(top_five / 5000)

        assert shares == sorted(shares, reverse=True)

    def test_cumulative_weights(self) -> None:
        weights = zipf_cumulative_weights(4, 1.0)

        assert len(weights) == 4
        assert weights[0] == pytest.approx(1.0)
        assert weights[-1] == pytest.approx(1 + 1 / 2 + 1 / 3 + 1 / 4)
        assert list(weights) == sorted(weights)

    def test_cumulative_weights_are_shared_read_only(self) -> None:
        """Test that cached weights cannot be mutated by a caller."""
        weights = zipf_cumulative_weights(10, 0.5)

        assert zipf_cumulative_weights(10, 0.5) is weights
        assert isinstance(weights, np.ndarray)
        with pytest.raises(ValueError):
            weights[0] = 0.0

    def test_returns_python_int(self) -> None:
        index = ZipfPopularitySampler(seed=2).sample(50, 1.0)

        assert type(index) is int


class TestUniformPopularitySampler:
    """Test cases for UniformPopularitySampler."""

    def test_ignores_concentration(self) -> None:
        first = UniformPopularitySampler(seed=3)
        second = UniformPopularitySampler(seed=3)

        assert [first.sample(50, 0.01) for _ in range(100)] == [
            second.sample(50, 1000.0) for _ in range(100)
        ]

    def test_empty_population_raises(self) -> None:
        with pytest.raises(EmptyPopulation):
            UniformPopularitySampler(seed=0).sample(0, 1.0)

    def test_returns_python_int(self) -> None:
        index = UniformPopularitySampler(seed=2).sample(50, 1.0)

        assert type(index) is int
        assert 0 <= index < 50


class TestCreateSampler:
    """Test cases for the sampler factory."""

    @pytest.mark.parametrize(
        "name,expected",
        [("zipf", ZipfPopularitySampler), ("uniform", UniformPopularitySampler)],
    )
    def test_known_names(self, name: str, expected: type) -> None:
        assert isinstance(create_sampler(name, seed=1), expected)

    def test_unknown_name(self) -> None:
        with pytest.raises(ValueError, match="Unknown sampler"):
            create_sampler("dirichlet")
