"""
Generate discretized floating point values.

Time values can occur in several roles in a solver test script:

- the query time of a solve request
- the time of the zero of a root function
- the stop time

These roles must never coincide, because otherwise the order in which the
solver detects them is dictated by floating point error and is unpredictable.
We therefore

- discretize the values, i.e. make them a multiple of a fixed
  :obj:`DISCRETE_UNIT`, and
- offset each role by a different sub-unit value, so that e.g. a stop time is
  always distinct from a query time modulo :obj:`DISCRETE_UNIT`.

The smallest separation between offsets bounds the tolerance that may be used
to compare such values, :obj:`TIME_EPSILON`.

"""
from enum import Enum
import scale.qc.generate.numeric as numeric

__all__ = [
    "Sign",
    "DISCRETE_UNIT",
    "QUERY_TIME_OFFSET",
    "ROOT_TIME_OFFSET",
    "STOP_TIME_OFFSET",
    "TIME_EPSILON",
    "discrete_float_type",
]

DISCRETE_UNIT = 1.0
QUERY_TIME_OFFSET = 0.0
ROOT_TIME_OFFSET = DISCRETE_UNIT / 2.0
STOP_TIME_OFFSET = DISCRETE_UNIT / 4.0

# This must be smaller than any of the offsets.
TIME_EPSILON = DISCRETE_UNIT / 8.0


class Sign(str, Enum):
    POSITIVE = "positive"
    NON_NEGATIVE = "non_negative"
    ARBITRARY_SIGN = "arbitrary_sign"


_RANKS = {
    Sign.POSITIVE: (numeric.gen_pos, numeric.shrink_pos),
    Sign.NON_NEGATIVE: (numeric.gen_nat, numeric.shrink_nat),
    Sign.ARBITRARY_SIGN: (numeric.gen_int, numeric.shrink_int),
}


def discrete_float_type(offset: float, sign: Sign = Sign.NON_NEGATIVE):
    """Return a (gen, shrink) pair for floats of the form ``rank * unit + offset``.

    The integer rank is generated and shrunk with the integer functions matching
    ``sign``, so shrinking moves the value toward ``offset`` while it stays on the
    same lattice.

    Examples:

        >>> gen, shrink = discrete_float_type(STOP_TIME_OFFSET)
        >>> shrink(3.25).to_list()
        [0.25, 1.25, 2.25]

    """
    gen_rank, shrink_rank = _RANKS[Sign(sign)]

    def gen(ctx):
        return float(gen_rank(ctx)) * DISCRETE_UNIT + offset

    def shrink(f: float):
        rank = int((f - offset) / DISCRETE_UNIT)
        return shrink_rank(rank).map(lambda x: float(x) * DISCRETE_UNIT + offset)

    return gen, shrink


gen_t0, shrink_t0 = discrete_float_type(0.0)
gen_query_time, shrink_query_time = discrete_float_type(QUERY_TIME_OFFSET)
gen_root_time, shrink_root_time = discrete_float_type(ROOT_TIME_OFFSET)
gen_stop_time, shrink_stop_time = discrete_float_type(STOP_TIME_OFFSET)

# Similar arrangement for non-time values.
gen_discrete_float, shrink_discrete_float = discrete_float_type(0.0)
