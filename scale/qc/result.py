"""
The :obj:`scale.qc.result` module models the observable results of one step of a
test script and compares expected against actual results.

The result values form a closed tagged union:

- :obj:`Unit`, :obj:`Int`, :obj:`Float` scalars
- :obj:`Vector` a numpy vector of floats
- :obj:`Aggr` an ordered list of results
- :obj:`Opaque` a failure identified by its category, e.g. an exception class name
- :obj:`Wildcard` matches anything
- :obj:`TypeOnly` matches any value of the same shape

:obj:`Wildcard` and :obj:`TypeOnly` are only legal on the expected side. Floats are
compared with a tolerance rather than bit-exactly.

.. code::

    from scale.qc.result import Aggr, Float, Wildcard, matches

    matches(Aggr([Float(1.0), Wildcard()]), Aggr([Float(1.0000001), Float(7.0)]))  # True

"""
from dataclasses import dataclass, field
from typing import Any, Tuple, Union
import numpy as np

__all__ = [
    "CMP_EPS",
    "UsageError",
    "Unit",
    "Int",
    "Float",
    "Vector",
    "Aggr",
    "Opaque",
    "Wildcard",
    "TypeOnly",
    "ResultValue",
    "matches",
    "opaque_of_exception",
    "is_opaque",
    "not_opaque",
    "show",
]

CMP_EPS = 1e-5


class UsageError(ValueError):
    """Raised when the comparator is used against its contract."""


@dataclass(frozen=True)
class Unit:
    pass


@dataclass(frozen=True)
class Int:
    value: int


@dataclass(frozen=True)
class Float:
    value: float


@dataclass(frozen=True, eq=False)
class Vector:
    values: np.ndarray

    def __post_init__(self):
        # Always keep a private copy, the caller may reuse its buffer.
        object.__setattr__(self, "values", np.array(self.values, dtype=float))


@dataclass(frozen=True)
class Aggr:
    items: Tuple["ResultValue", ...]

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))


@dataclass(frozen=True)
class Opaque:
    category: str
    payload: Any = field(default=None, compare=False)


@dataclass(frozen=True)
class Wildcard:
    pass


@dataclass(frozen=True)
class TypeOnly:
    expected: "ResultValue"


ResultValue = Union[Unit, Int, Float, Vector, Aggr, Opaque, Wildcard, TypeOnly]


def opaque_of_exception(exn: BaseException) -> Opaque:
    """Wrap an exception as an :obj:`Opaque` result keyed on its class name."""
    return Opaque(type(exn).__name__, str(exn))


def is_opaque(r: ResultValue) -> bool:
    return isinstance(r, Opaque)


def not_opaque(r: ResultValue) -> bool:
    return not is_opaque(r)


def _same_length_and_all(f, xs, ys, eps):
    return len(xs) == len(ys) and all(f(x, y, eps) for x, y in zip(xs, ys))


def _check_actual(actual):
    if isinstance(actual, (Wildcard, TypeOnly)):
        raise UsageError("matches: wild card on the actual side")


def _type_matches(expected, actual, eps):
    if isinstance(expected, Wildcard):
        return True
    if isinstance(expected, TypeOnly):
        raise UsageError("matches: nested TypeOnly")
    _check_actual(actual)
    if isinstance(expected, Opaque):
        if isinstance(actual, Opaque):
            raise UsageError("matches: TypeOnly of an Opaque failure")
        return False
    if isinstance(expected, Aggr):
        return isinstance(actual, Aggr) and _same_length_and_all(
            _type_matches, expected.items, actual.items, eps
        )
    return type(expected) is type(actual)


def _matches(expected, actual, eps):
    if isinstance(expected, Wildcard):
        return True
    _check_actual(actual)
    if isinstance(expected, TypeOnly):
        return _type_matches(expected.expected, actual, eps)
    if type(expected) is not type(actual):
        return False
    if isinstance(expected, Unit):
        return True
    if isinstance(expected, Int):
        return expected.value == actual.value
    if isinstance(expected, Float):
        return abs(expected.value - actual.value) < eps
    if isinstance(expected, Vector):
        return len(expected.values) == len(actual.values) and bool(
            np.all(np.abs(expected.values - actual.values) < eps)
        )
    if isinstance(expected, Aggr):
        return _same_length_and_all(_matches, expected.items, actual.items, eps)
    if isinstance(expected, Opaque):
        return expected.category == actual.category
    raise UsageError(f"matches: not a result value: {expected!r}")


def matches(expected: ResultValue, actual: ResultValue, eps: float = CMP_EPS) -> bool:
    """Check if ``actual`` is a valid approximation of ``expected``.

    Args:
        expected: The expected result, possibly containing wild cards.
        actual: The observed result. Must not contain wild cards.
        eps: Absolute tolerance for float components.

    Raises:
        UsageError: If a wild card appears on the actual side against
            anything but a :obj:`Wildcard`, if a :obj:`TypeOnly` is nested in another, or if a
            :obj:`TypeOnly` wrapping an :obj:`Opaque` meets an :obj:`Opaque`.

    Returns:
        bool: whether the results match

    Examples:

        >>> matches(Wildcard(), Int(3))
        True
        >>> matches(Wildcard(), Wildcard())
        True
        >>> matches(Float(1.0000001), Float(1.0))
        True
        >>> matches(Float(1.0), Float(1.1))
        False
        >>> matches(TypeOnly(Int(0)), Int(12))
        True
        >>> matches(Opaque("ZeroDivisionError", "x"), Opaque("ZeroDivisionError", "y"))
        True

    """
    return _matches(expected, actual, eps)


def _show(r, arg_pos):
    def parens(text, cond):
        return f"({text})" if cond else text

    if isinstance(r, Wildcard):
        return "_"
    if isinstance(r, Unit):
        return "()"
    if isinstance(r, Int):
        return parens(str(r.value), arg_pos and r.value < 0)
    if isinstance(r, Float):
        return parens(repr(float(r.value)), arg_pos and r.value < 0)
    if isinstance(r, Vector):
        return "[|" + "; ".join(repr(float(v)) for v in r.values) + "|]"
    if isinstance(r, TypeOnly):
        return parens("Type " + _show(r.expected, True), arg_pos)
    if isinstance(r, Aggr):
        return parens(
            "Aggr [" + "; ".join(_show(x, False) for x in r.items) + "]", arg_pos
        )
    if isinstance(r, Opaque):
        text = "exception " + r.category
        if r.payload is not None:
            text += f"({r.payload})"
        return parens(text, arg_pos)
    return repr(r)


def show(r: ResultValue) -> str:
    """Render a result value compactly.

    Examples:

        >>> show(Aggr([Int(-1), TypeOnly(Float(2.0)), Wildcard()]))
        'Aggr [-1; Type 2.0; _]'

    """
    return _show(r, False)
