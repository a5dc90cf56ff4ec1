"""
Generators and shrinkers for lists, arrays and pairs.

Some of the algorithms are adapted from Haskell's QuickCheck. Keep in mind that
the shrink-and-test cycle requires all shrinkers to ensure the outputs are
strictly simpler than the input in some sense. For lists that means either
shorter, or the same length with one element replaced by a shrunk value.

Element shrinkers are passed first so shrinkers compose with
:func:`functools.partial`:

.. code::

    from functools import partial
    shrink = partial(shrink_list, numeric.shrink_int)
    shrink([3, 1])

"""
from typing import Any, Callable, Optional, Sequence, Tuple
import numpy as np
import scale.qc.stream as stream
import scale.qc.generate.numeric as numeric
from scale.qc.generate.context import GenContext

__all__ = [
    "gen_list",
    "shrink_list",
    "shrink_fixed_size_list",
    "gen_1pass_list",
    "shrink_1pass_list",
    "gen_array",
    "shrink_array",
    "shrink_vector",
    "shrink_pair",
    "uniq_list",
    "uniq_array",
]

Shrink = Callable[[Any], stream.Stream]


def gen_list(gen_elem: Callable[[GenContext], Any]):
    """Return a generator of lists of length gen_nat whose elements come from
    ``gen_elem``."""

    def gen(ctx: GenContext) -> list:
        n = numeric.gen_nat(ctx)
        return [gen_elem(ctx) for _ in range(n)]

    return gen


def _drop_then_replace(n, drop, shrink_at) -> stream.Stream:
    """Candidates ``drop(0) ... drop(n-1)`` then ``shrink_at(n-1) ... shrink_at(0)``.

    Each candidate is rebuilt from its index, so forcing the k-th one does not
    nest one stream layer per element. Pass ``drop=None`` to keep the length.
    """
    drops = stream.empty() if drop is None else stream.enum(0, n - 1).map(drop)
    backwards = stream.enum_then(n - 1, n - 2, 0)
    return drops.append(stream.concat(backwards.map(shrink_at)))


def shrink_list(shrink_elem: Shrink, xs: Sequence) -> stream.Stream:
    """Shrink a list by dropping or shrinking one element.

    The candidates for ``x:xs`` are, in order: ``xs`` (drop the head), ``x``
    followed by each shrink of ``xs``, then each shrink of ``x`` followed by
    ``xs``. Unrolled, that is every single-element drop from the front, then
    every single-element shrink from the back.

    Examples:

        >>> shrink_list(numeric.shrink_int, [2, 1]).to_list()
        [[1], [2], [2, 0], [0, 1], [1, 1]]

    """
    xs = list(xs)

    def drop(i):
        return xs[:i] + xs[i + 1 :]

    def shrink_at(i):
        return stream.defer(lambda: shrink_elem(xs[i])).map(
            lambda y: xs[:i] + [y] + xs[i + 1 :]
        )

    return _drop_then_replace(len(xs), drop, shrink_at)


def shrink_fixed_size_list(shrink_elem: Shrink, xs: Sequence) -> stream.Stream:
    """Shrink the elements of a list without changing its length.

    Examples:

        >>> shrink_fixed_size_list(numeric.shrink_int, [2, 1]).to_list()
        [[2, 0], [0, 1], [1, 1]]

    """
    xs = list(xs)

    def shrink_at(i):
        return stream.defer(lambda: shrink_elem(xs[i])).map(
            lambda y: xs[:i] + [y] + xs[i + 1 :]
        )

    return _drop_then_replace(len(xs), None, shrink_at)


def gen_1pass_list(gen: Callable[[GenContext, Any], Tuple[Any, Any]], seed):
    """Generate lists satisfying an invariant checkable by one in-order scan.

    The generator returns ``[y1, y2, ..., yn]`` where ``(s1, y1) = gen(ctx, seed)``,
    ``(s2, y2) = gen(ctx, s1)`` and so on. ``gen`` produces a value taking into
    account the accumulated information ``s`` about previous elements and returns
    the updated accumulator along with the value. The length is drawn with
    :func:`numeric.gen_nat`.

    For example, ``gen_1pass_list(lambda ctx, s: (s + gen_nat(ctx),) * 2, 0)``
    generates non-strictly increasing lists of natural numbers.
    """

    def gen_list(ctx: GenContext) -> list:
        n = numeric.gen_nat(ctx)
        acc = seed
        ys = []
        for _ in range(n):
            acc, y = gen(ctx, acc)
            ys.append(y)
        return ys

    return gen_list


def shrink_1pass_list(
    shrink: Callable[[Any, Any], stream.Stream],
    fixup: Callable[[Any, Any], Tuple[Any, Any]],
    seed,
    xs: Sequence,
) -> stream.Stream:
    """Shrink a list while maintaining an invariant checked by one in-order scan.

    ``xs`` must be one of the lists :func:`gen_1pass_list` can produce from
    ``seed``; the shrunk lists will be such lists as well. ``shrink`` and
    ``fixup`` must be pure.

    ``shrink(s, x)`` yields ``(s', x')`` pairs that ``gen(ctx, s)`` could return,
    with ``x'`` smaller than ``x``.

    ``fixup(s, x)`` restores the invariant for an element after something before it
    changed. It returns a pair that ``gen(ctx, s)`` could return; the value should
    equal ``x`` whenever ``x`` is already valid, and it must be idempotent.

    The candidates come in the order of :func:`shrink_list`: every single-element
    drop from the front, then every single-element shrink from the back. After
    dropping or replacing, the suffix is passed through ``fixup``. This repairs the invariant locally and
    does not search for the globally smallest repair.
    """
    xs = list(xs)
    n = len(xs)

    def fixup_list(acc, ys):
        out = []
        for y in ys:
            acc, y = fixup(acc, y)
            out.append(y)
        return out

    def prefix_accs():
        # accs[i] is the accumulator in effect when xs[i] is visited
        accs = [seed]
        for x in xs[:-1]:
            accs.append(fixup(accs[-1], x)[0])
        return accs

    accs = stream.Lazy(prefix_accs)

    def drop(i):
        return xs[:i] + fixup_list(accs.force()[i], xs[i + 1 :])

    def shrink_at(i):
        return stream.defer(lambda: shrink(accs.force()[i], xs[i])).map(
            lambda sx: xs[:i] + [sx[1]] + fixup_list(sx[0], xs[i + 1 :])
        )

    return _drop_then_replace(n, drop, shrink_at)


def gen_array(gen_elem: Callable[[GenContext], Any], size: Optional[int] = None):
    """Return a generator of numpy arrays.

    The length is ``size`` if given, else drawn with :func:`numeric.gen_pos` on
    each call.
    """

    def gen(ctx: GenContext) -> np.ndarray:
        n = numeric.gen_pos(ctx) if size is None else size
        return np.array([gen_elem(ctx) for _ in range(n)])

    return gen


def shrink_array(shrink_elem: Shrink, a: np.ndarray) -> stream.Stream:
    """:func:`shrink_list` over the elements of a numpy array."""
    a = np.asarray(a)
    return shrink_list(shrink_elem, a.tolist()).map(
        lambda ys: np.array(ys, dtype=a.dtype)
    )


def shrink_vector(
    shrink_elem: Shrink, a: np.ndarray, shrink_size: bool = True
) -> stream.Stream:
    """Shrink a numpy vector by random access.

    Offers the vector with element ``i`` removed for every ``i`` (only when
    ``shrink_size``), then the vector with element ``i`` replaced by each of its
    shrinks, for every ``i`` in order. Inputs are never modified.

    Examples:

        >>> [v.tolist() for v in shrink_vector(numeric.shrink_int, np.array([1, 2]))]
        [[2], [1], [0, 2], [1, 0], [1, 1]]

    """
    a = np.asarray(a)
    n = len(a)

    def drop(i):
        return np.delete(a, i)

    def replace(i, v):
        b = a.copy()
        b[i] = v
        return b

    def shrink_at(i):
        return stream.defer(lambda: shrink_elem(a[i].item())).map(
            lambda v: replace(i, v)
        )

    return stream.guard(shrink_size, stream.enum(0, n - 1).map(drop)).append(
        stream.concat(stream.enum(0, n - 1).map(shrink_at))
    )


def shrink_pair(shrink_x: Shrink, shrink_y: Shrink, pair: Tuple[Any, Any]):
    """Shrink either component of a pair, the first one first."""
    x, y = pair
    return (
        stream.defer(lambda: shrink_x(x))
        .map(lambda x1: (x1, y))
        .append(stream.defer(lambda: shrink_y(y)).map(lambda y1: (x, y1)))
    )


def uniq_list(xs: Sequence) -> list:
    """Remove duplicates without reordering.

    Examples:

        >>> uniq_list([3, 1, 3, 2, 1])
        [3, 1, 2]

    """
    seen = set()
    out = []
    for x in xs:
        if x not in seen:
            seen.add(x)
            out.append(x)
    return out


def uniq_array(a: np.ndarray) -> np.ndarray:
    """Remove duplicates from a 1-D array without reordering."""
    a = np.asarray(a)
    _, index = np.unique(a, return_index=True)
    return a[np.sort(index)]
