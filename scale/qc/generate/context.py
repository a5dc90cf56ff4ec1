"""
The generation context passed to every generator.

A generator is any callable taking a :obj:`GenContext` and returning a value. The
context carries the size control, which the driver grows with the test index so
that early tests are cheap, and the random source. Passing it explicitly (rather
than keeping a global size) keeps generators free of shared mutable state.
"""
from dataclasses import dataclass, field
from typing import Optional
import numpy as np

__all__ = ["GenContext"]


@dataclass
class GenContext:
    """Size and random source for generators.

    Args:
        size: Upper bound driving how large generated values are.
        rng: A numpy random generator. All randomness must come from here so a
            seed fixes the whole sequence of generated values.

    Examples:

        >>> ctx = GenContext.from_seed(42, size=10)
        >>> a = [int(ctx.rng.integers(100)) for _ in range(3)]
        >>> ctx = GenContext.from_seed(42, size=10)
        >>> a == [int(ctx.rng.integers(100)) for _ in range(3)]
        True

    """

    size: int = 5
    rng: np.random.Generator = field(default_factory=np.random.default_rng)

    @staticmethod
    def from_seed(seed: Optional[int], size: int = 5):
        return GenContext(size=size, rng=np.random.default_rng(seed))

    def randint(self, n: int) -> int:
        """A uniform integer in [0, n) as a plain Python int."""
        return int(self.rng.integers(n))
