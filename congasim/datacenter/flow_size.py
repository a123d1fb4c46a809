"""
Flow size generators

Each generator is a zero-argument callable returning a flow size in bytes.
"""

import random
from typing import Callable, Optional

FlowSizeGenerator = Callable[[], int]


class FlowSizeGenerators:
    """
    Collection of flow size generators for different workloads
    """

    @staticmethod
    def fixed(size: int) -> FlowSizeGenerator:
        """Generate fixed size flows"""
        if size <= 0:
            raise ValueError(f"Flow size must be positive, got {size}")

        def generator():
            return size
        return generator

    @staticmethod
    def uniform(min_size: int, max_size: int, rng: Optional[random.Random] = None) -> FlowSizeGenerator:
        """Generate uniformly distributed flow sizes in [min_size, max_size]"""
        if min_size <= 0 or max_size < min_size:
            raise ValueError(f"Invalid flow size range [{min_size}, {max_size}]")
        rng = rng if rng is not None else random.Random()

        def generator():
            return rng.randint(min_size, max_size)
        return generator

    @staticmethod
    def exponential(mean_size: float, rng: Optional[random.Random] = None) -> FlowSizeGenerator:
        """
        Generate exponentially distributed flow sizes

        Sizes are rounded to whole bytes and are at least one byte.
        """
        if mean_size <= 0:
            raise ValueError(f"Mean flow size must be positive, got {mean_size}")
        rng = rng if rng is not None else random.Random()

        def generator():
            return max(1, round(rng.expovariate(1.0 / mean_size)))
        return generator
