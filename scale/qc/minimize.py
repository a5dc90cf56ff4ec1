"""
Minimize a counterexample by greedy shrinking.

Starting from a failing input, the minimizer walks the shrink stream of the
current input and takes the first candidate that still fails. It repeats from
that candidate until no candidate fails, which is a local minimum: every
candidate offered by the shrinker for the result passes the property.

The candidate streams are lazy and the search stops at the first failing
candidate, so the cost is proportional to the number of accepted shrinks times
the average search depth per round, not to the size of the shrink space.
"""
from dataclasses import dataclass
from typing import Any, Callable, Optional
import scale.qc.internal as internal
from scale.qc.outcome import Outcome, describe, is_pass
from scale.qc.sandbox import InProcessSandbox

__all__ = ["CounterexampleRecord", "minimize"]


@dataclass
class CounterexampleRecord:
    """The state of a minimization.

    Attributes:
        value: Current (smallest so far) failing input.
        outcome: The outcome of the property on :attr:`value`.
        shrinks: Number of accepted shrinks so far.
    """

    value: Any
    outcome: Outcome
    shrinks: int = 0

    def accept(self, value, outcome: Outcome):
        self.value = value
        self.outcome = outcome
        self.shrinks += 1


def minimize(
    shrink: Callable[[Any], Any],
    prop: Callable[[Any], Outcome],
    x,
    outcome: Outcome,
    sandbox=None,
    show: Optional[Callable[[Any], str]] = None,
):
    """Minimize a counterexample ``x`` of property ``prop``.

    It is up to the caller to ensure ``outcome``, the result of ``prop(x)``, is a
    failure; this function assumes that's the case and returns it unchanged when
    no smaller counterexample is found.

    Args:
        shrink: Shrinker returning a stream of strictly smaller candidates.
        prop: The property.
        x: The failing input.
        outcome: The failing outcome of ``prop(x)``.
        sandbox: Where to evaluate candidates, default :obj:`InProcessSandbox`.
        show: If given, every attempted candidate is logged, rendered with it,
            along with its verdict.

    Returns:
        (int, value, Outcome): number of shrinks performed, the minimized input and
        the property outcome for it

    Examples:

        >>> from scale.qc.generate.numeric import shrink_int
        >>> from scale.qc.outcome import boolean_prop
        >>> shrinks, value, outcome = minimize(
        ...     shrink_int, boolean_prop(lambda n: n < 10), 100, None)
        >>> value
        10

    """
    if sandbox is None:
        sandbox = InProcessSandbox()
    record = CounterexampleRecord(x, outcome)

    def failure(candidate):
        result = sandbox.run(prop, candidate)
        if show is not None:
            internal.logger.info(
                "Trying",
                input=show(candidate),
                verdict="not a counterexample" if is_pass(result) else "triggers bug",
            )
        if is_pass(result):
            return None
        return candidate, result

    while True:
        found = shrink(record.value).find_first_mapped(failure)
        if found is None:
            break
        record.accept(*found)
        internal.logger.debug(
            "Accepted shrink", shrinks=record.shrinks, outcome=describe(record.outcome)
        )

    return record.shrinks, record.value, record.outcome
