"""
Generators and shrinkers for integers.

Shrinking follows Haskell's QuickCheck: offer the negation, then the tiny values
0, 1 and 2, then ``n`` with successively more of its low bits removed. Every
candidate is strictly less complex than ``n`` (smaller magnitude), except the
negation of a negative number, so there are only O(log n) candidates and no
infinite shrinking chain.
"""
from typing import Callable, Sequence
import scale.qc.stream as stream
from scale.qc.generate.context import GenContext

__all__ = [
    "gen_nat",
    "gen_pos",
    "gen_int",
    "gen_choice",
    "shrink_int",
    "shrink_nat",
    "shrink_pos",
]


def gen_nat(ctx: GenContext) -> int:
    """A natural number in [0, max(1, size))."""
    return ctx.randint(max(1, ctx.size))


def gen_pos(ctx: GenContext) -> int:
    """A positive number in [1, max(1, size)]."""
    return gen_nat(ctx) + 1


def gen_int(ctx: GenContext) -> int:
    """An integer in [-size, size)."""
    size = max(ctx.size, 1)
    return ctx.randint(size * 2) - size


def gen_choice(choices: Sequence[Callable[[GenContext], object]]):
    """Return a generator which picks one of ``choices`` at random and calls it.

    Examples:

        >>> g = gen_choice([lambda ctx: "a", lambda ctx: "b"])
        >>> g(GenContext.from_seed(1)) in ("a", "b")
        True

    """
    choices = list(choices)
    if not choices:
        raise ValueError("gen_choice needs at least one generator")

    def gen(ctx: GenContext):
        return choices[ctx.randint(len(choices))](ctx)

    return gen


def _half(x: int) -> int:
    # Truncate toward zero so negative numbers approach 0 like positive ones.
    return -((-x) // 2) if x < 0 else x // 2


def shrink_int(n: int) -> stream.Stream:
    """Shrink an integer toward zero.

    Examples:

        >>> shrink_int(5).to_list()
        [0, 1, 2, 3, 4]
        >>> shrink_int(-5).to_list()
        [5, 0, 1, 2, -3, -4]
        >>> shrink_int(0).to_list()
        []

    """

    def less_complex(k):
        return abs(k) < abs(n)

    higher = (
        stream.iterate(_half, n)
        .map(lambda h: n - h)
        .take_while(less_complex)
        .filter(lambda x: x not in (0, 1, 2))
    )
    return stream.guard1(n < -n, -n).append(
        stream.of_list([0, 1, 2]).append(higher).filter(less_complex)
    )


def shrink_nat(n: int) -> stream.Stream:
    return shrink_int(n).map(abs)


def shrink_pos(n: int) -> stream.Stream:
    return shrink_nat(n - 1).map(lambda x: x + 1)
