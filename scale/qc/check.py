"""
The generate, test, shrink and report loop.

:func:`quickcheck` draws up to ``max_tests`` inputs from a generator, growing the
generation size with the test index so early tests are cheap, and evaluates the
property on each through a sandbox. The first failure is minimized with
:func:`scale.qc.minimize.minimize` and reported. A generator that raises aborts
the run with :obj:`GeneratorFailure`.

A :obj:`Check` bundles a property with the :obj:`Arbitrary` (generator, shrinker
and printer) of its input so it can be named as module:name on the command line
and run with :func:`run_check`.
"""
from dataclasses import dataclass
from typing import Any, Callable, Optional
import numpy as np
from tqdm import tqdm
import scale.qc.internal as internal
import scale.qc.report as report
from scale.qc.generate.context import GenContext
from scale.qc.minimize import minimize
from scale.qc.outcome import Crashed, Outcome, describe, is_pass, no_shrink
from scale.qc.sandbox import InProcessSandbox, make_sandbox

__all__ = [
    "EXIT_PASSED",
    "EXIT_FALSIFIED",
    "EXIT_ABORTED",
    "GeneratorFailure",
    "Arbitrary",
    "Check",
    "CheckReport",
    "new_seed",
    "quickcheck",
    "run_check",
]

EXIT_PASSED = 0
EXIT_FALSIFIED = 1
EXIT_ABORTED = 2


class GeneratorFailure(RuntimeError):
    """The generator raised, which is a configuration error and not a
    counterexample.

    Attributes:
        tests_run: Number of tests that passed before the generator failed.
        seed: The seed of the run.
    """

    def __init__(self, tests_run: int, seed: int, cause: BaseException):
        super().__init__(
            f"the generator failed (after {tests_run} tests): {type(cause).__name__}: {cause}"
        )
        self.tests_run = tests_run
        self.seed = seed


@dataclass
class Arbitrary:
    """How to generate, shrink and print values of one type.

    Attributes:
        gen: Generator taking a :obj:`scale.qc.generate.context.GenContext`.
        shrink: Shrinker, :func:`scale.qc.outcome.no_shrink` by default.
        show: Printer used in logs and reports.
    """

    gen: Callable[[GenContext], Any]
    shrink: Callable[[Any], Any] = no_shrink
    show: Callable[[Any], str] = repr


@dataclass
class Check:
    """A named property together with the :obj:`Arbitrary` of its input."""

    name: str
    arbitrary: Arbitrary
    prop: Callable[[Any], Outcome]
    description: str = ""


@dataclass
class CheckReport:
    """The result of a run.

    Attributes:
        status: "passed", "falsified" or "aborted".
        tests_run: Number of tests that passed (before the failure, if any).
        seed: Seed for the random generator, enough to reproduce the run.
        shrinks: Number of accepted shrinks.
        original: The first failing input.
        value: The minimized failing input.
        outcome: Property outcome for :attr:`value`.
        shown_input: :attr:`value` rendered with the printer of the input type.
        error: Diagnostic for an aborted run.
    """

    status: str
    tests_run: int
    seed: int
    shrinks: int = 0
    original: Any = None
    value: Any = None
    outcome: Optional[Outcome] = None
    shown_input: str = ""
    error: str = ""

    @property
    def passed(self) -> bool:
        return self.status == "passed"

    @property
    def exit_code(self) -> int:
        return {
            "passed": EXIT_PASSED,
            "falsified": EXIT_FALSIFIED,
        }.get(self.status, EXIT_ABORTED)

    def render(self) -> str:
        return report.render(self)


def new_seed() -> int:
    """Draw a fresh seed from operating system entropy."""
    return int(np.random.SeedSequence().entropy % ((1 << 30) - 1))


def quickcheck(
    gen: Callable[[GenContext], Any],
    shrink: Callable[[Any], Any],
    prop: Callable[[Any], Outcome],
    max_tests: int,
    seed: Optional[int] = None,
    sandbox=None,
    show: Callable[[Any], str] = repr,
    verbose: bool = False,
    do_shrink: bool = True,
    progress_bar: bool = True,
) -> CheckReport:
    """Test ``prop`` on up to ``max_tests`` random inputs.

    Args:
        gen: Generator of inputs.
        shrink: Shrinker of inputs. Minimization is skipped for
            :func:`scale.qc.outcome.no_shrink`.
        prop: The property.
        max_tests: Number of inputs to try.
        seed: Seed of the random generator. Drawn fresh and logged when None.
        sandbox: Where to evaluate the property, default :obj:`InProcessSandbox`.
        show: Printer for inputs.
        verbose: Log every tested input and every shrink attempt.
        do_shrink: Whether to minimize a counterexample.
        progress_bar: Show a tqdm progress bar.

    Raises:
        GeneratorFailure: If the generator raises.

    Returns:
        CheckReport: passed or falsified report

    Examples:

        >>> from scale.qc.generate.numeric import gen_int, shrink_int
        >>> from scale.qc.outcome import boolean_prop
        >>> r = quickcheck(gen_int, shrink_int, boolean_prop(lambda n: n * n >= 0),
        ...                20, seed=1, progress_bar=False)
        >>> r.status, r.tests_run
        ('passed', 20)

    """
    if seed is None:
        seed = new_seed()
    if sandbox is None:
        sandbox = InProcessSandbox()
    internal.logger.info("Starting quickcheck", seed=seed, max_tests=max_tests)

    ctx = GenContext.from_seed(seed)
    num_passed = 0
    with tqdm(total=max_tests, disable=not progress_bar) as pbar:
        while num_passed < max_tests:
            ctx.size = num_passed
            try:
                x = gen(ctx)
            except Exception as exn:
                internal.logger.error(
                    "Error: the generator failed",
                    tests=num_passed,
                    error=f"{type(exn).__name__}: {exn}",
                )
                raise GeneratorFailure(num_passed, seed, exn) from exn

            if verbose:
                internal.logger.info("Testing", input=show(x))
            outcome = sandbox.run(prop, x)
            if is_pass(outcome):
                num_passed += 1
                pbar.update(1)
                continue

            pbar.close()
            if isinstance(outcome, Crashed):
                internal.logger.warning(
                    "Failed! Exception raised",
                    tests=num_passed,
                    fault=str(outcome.fault),
                    details=outcome.fault.details,
                )
            else:
                internal.logger.warning(
                    "Failed!", tests=num_passed, outcome=describe(outcome)
                )
            if verbose:
                internal.logger.info("Counterexample was", input=show(x))

            shrinks, value, outcome = 0, x, outcome
            if do_shrink and shrink is not no_shrink:
                internal.logger.info("Shrinking...")
                shrinks, value, outcome = minimize(
                    shrink,
                    prop,
                    x,
                    outcome,
                    sandbox=sandbox,
                    show=show if verbose else None,
                )
                internal.logger.info(f"{shrinks} shrinks.")

            return CheckReport(
                status="falsified",
                tests_run=num_passed,
                seed=seed,
                shrinks=shrinks,
                original=x,
                value=value,
                outcome=outcome,
                shown_input=show(value),
            )

    internal.logger.info(f"+++ OK, passed {max_tests} tests.", seed=seed)
    return CheckReport(status="passed", tests_run=max_tests, seed=seed)


def run_check(
    check: Check, options: internal.CheckOptions, target: Optional[str] = None
) -> CheckReport:
    """Run a :obj:`Check` with the given options.

    A generator failure is logged and turned into an "aborted" report. When the run
    is falsified and ``options.failed_file`` is set, a reproduction script is
    written there; that needs the module:name ``target`` of the check.
    """
    seed = options.seed if options.seed is not None else new_seed()
    internal.logger.info("random generator seed value", seed=seed, check=check.name)
    sandbox = make_sandbox(options.sandbox, options.timeout)
    arbitrary = check.arbitrary
    try:
        result = quickcheck(
            arbitrary.gen,
            arbitrary.shrink,
            check.prop,
            options.max_tests,
            seed=seed,
            sandbox=sandbox,
            show=arbitrary.show,
            verbose=options.verbose,
            do_shrink=options.shrink,
            progress_bar=options.progress_bar,
        )
    except GeneratorFailure as gf:
        return CheckReport(
            status="aborted", tests_run=gf.tests_run, seed=gf.seed, error=str(gf)
        )

    if result.status == "falsified" and options.failed_file:
        if target is None:
            internal.logger.warning(
                "Cannot write a reproduction script without a module:name target",
                failed_file=options.failed_file,
            )
        else:
            report.write_failed_file(result, options.failed_file, target)
    return result
