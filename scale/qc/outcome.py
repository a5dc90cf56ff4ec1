"""
Test outcomes and properties.

A property is a function from a test input to an :obj:`Outcome`. :obj:`Pass` means
the property holds for that input, :obj:`Falsified` means the input falsifies the
property with a user-defined ``reason``, and :obj:`Crashed` means evaluating the
property faulted. Properties should not return :obj:`Crashed` themselves but let
exceptions propagate; the sandbox catches them and converts them. :obj:`TimedOut`
is produced by sandboxes with a wall-clock limit.

Outcomes are plain data so they can cross a process boundary.
"""
from dataclasses import dataclass
import traceback
from typing import Any, Callable, Optional, Union
import scale.qc.stream as stream

__all__ = [
    "Fault",
    "Pass",
    "Falsified",
    "Crashed",
    "TimedOut",
    "Outcome",
    "is_pass",
    "describe",
    "boolean_prop",
    "no_shrink",
]


@dataclass(frozen=True)
class Fault:
    """Description of a fault in the code under test.

    Attributes:
        kind: Exception class name, or "signal"/"exit" for abnormal worker
            termination.
        message: Human readable message.
        details: Traceback or captured error output, possibly empty.
        exitcode: Process exit code for abnormal termination.
    """

    kind: str
    message: str = ""
    details: str = ""
    exitcode: Optional[int] = None

    @staticmethod
    def of_exception(exn: BaseException):
        return Fault(
            kind=type(exn).__name__,
            message=str(exn),
            details="".join(
                traceback.format_exception(type(exn), exn, exn.__traceback__)
            ),
        )

    def __str__(self):
        if self.message:
            return f"{self.kind}: {self.message}"
        return self.kind


@dataclass(frozen=True)
class Pass:
    pass


@dataclass(frozen=True)
class Falsified:
    reason: Any = None


@dataclass(frozen=True)
class Crashed:
    fault: Fault


@dataclass(frozen=True)
class TimedOut:
    seconds: float


Outcome = Union[Pass, Falsified, Crashed, TimedOut]


def is_pass(outcome: Outcome) -> bool:
    return isinstance(outcome, Pass)


def describe(outcome: Outcome) -> str:
    """One-line description of an outcome for logs and reports."""
    if isinstance(outcome, Pass):
        return "OK"
    if isinstance(outcome, Falsified):
        if outcome.reason is None:
            return "Falsified"
        return f"Falsified: {outcome.reason}"
    if isinstance(outcome, Crashed):
        return f"Crashed: {outcome.fault}"
    if isinstance(outcome, TimedOut):
        return f"Timed out after {outcome.seconds:g} s"
    return repr(outcome)


class boolean_prop:
    """Convert a predicate ``x -> bool`` into a property.

    A class rather than a closure so the property can be pickled and sent to a
    worker process when the predicate itself is a module-level function.

    Examples:

        >>> prop = boolean_prop(lambda x: x > 0)
        >>> prop(1), prop(0)
        (Pass(), Falsified(reason=None))

    """

    def __init__(self, predicate: Callable[[Any], bool]):
        self.predicate = predicate

    def __call__(self, x) -> Outcome:
        if self.predicate(x):
            return Pass()
        return Falsified()

    def __repr__(self):
        return f"boolean_prop({getattr(self.predicate, '__name__', self.predicate)})"


def no_shrink(x) -> stream.Stream:
    """A shrinker that never produces a candidate.

    Used as a stub when no shrinking function is available. The driver skips
    minimization altogether when given this shrinker.
    """
    return stream.empty()
