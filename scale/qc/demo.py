"""
Demonstration checks.

Each module-level :obj:`scale.qc.check.Check` here can be run from the command line,
e.g.

.. code::

    python -m scale.qc check scale.qc.demo:sum_reverse 50 --seed 42

"""
from functools import partial
import scale.qc.generate.collection as collection
import scale.qc.generate.discrete as discrete
import scale.qc.generate.numeric as numeric
from scale.qc.check import Arbitrary, Check
from scale.qc.outcome import Falsified, Pass, boolean_prop
from scale.qc.result import Float, matches

__all__ = ["sum_reverse", "double_keeps_sorted", "reciprocal", "distinct_roles"]


def _sum_equals_reversed_sum(xs):
    return sum(xs) == sum(reversed(xs))


int_lists = Arbitrary(
    gen=collection.gen_list(numeric.gen_int),
    shrink=partial(collection.shrink_list, numeric.shrink_int),
)

sum_reverse = Check(
    name="sum_reverse",
    arbitrary=int_lists,
    prop=boolean_prop(_sum_equals_reversed_sum),
    description="Reversing a list does not change its sum.",
)

# ---------------------------------------------------------------------------------------
# Sorted lists are generated as running sums of naturals. The accumulator is the
# previous element, which is a lower bound for the next one.


def _gen_sorted_step(ctx, acc):
    y = acc + numeric.gen_nat(ctx)
    return y, y


def _shrink_sorted_step(acc, x):
    return numeric.shrink_nat(x).filter(lambda y: y >= acc).map(lambda y: (y, y))


def _fixup_sorted_step(acc, x):
    y = max(acc, x)
    return y, y


def _gen_sorted_and_index(ctx):
    xs = collection.gen_1pass_list(_gen_sorted_step, 0)(ctx)
    return xs, numeric.gen_nat(ctx)


def _shrink_sorted_and_index(pair):
    return collection.shrink_pair(
        partial(
            collection.shrink_1pass_list, _shrink_sorted_step, _fixup_sorted_step, 0
        ),
        numeric.shrink_nat,
        pair,
    )


def _double_keeps_sorted(pair):
    xs, i = pair
    if not xs:
        return Pass()
    # i counts back from the second to last element, so dropping leading
    # elements keeps the same target. Indices past the front pick the first one.
    j = max(len(xs) - 2 - i, 0)
    ys = list(xs)
    ys[j] *= 2
    if ys == sorted(ys):
        return Pass()
    return Falsified(f"doubling element {j} gives {ys}")


double_keeps_sorted = Check(
    name="double_keeps_sorted",
    arbitrary=Arbitrary(gen=_gen_sorted_and_index, shrink=_shrink_sorted_and_index),
    prop=_double_keeps_sorted,
    description="Doubling one element of a sorted list keeps it sorted (false).",
)

# ---------------------------------------------------------------------------------------


def _reciprocal_is_small(n):
    return abs(1 / n) <= 1


reciprocal = Check(
    name="reciprocal",
    arbitrary=Arbitrary(gen=numeric.gen_int, shrink=numeric.shrink_int),
    prop=boolean_prop(_reciprocal_is_small),
    description="Crashes with ZeroDivisionError at zero.",
)

# ---------------------------------------------------------------------------------------


def _gen_query_and_stop(ctx):
    return discrete.gen_query_time(ctx), discrete.gen_stop_time(ctx)


def _shrink_query_and_stop(pair):
    return collection.shrink_pair(
        discrete.shrink_query_time, discrete.shrink_stop_time, pair
    )


def _roles_never_collide(pair):
    query, stop = pair
    return not matches(Float(query), Float(stop), eps=discrete.TIME_EPSILON)


distinct_roles = Check(
    name="distinct_roles",
    arbitrary=Arbitrary(gen=_gen_query_and_stop, shrink=_shrink_query_and_stop),
    prop=boolean_prop(_roles_never_collide),
    description="Query and stop times never compare equal.",
)
