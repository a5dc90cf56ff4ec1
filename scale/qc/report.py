"""
Reporting for quickcheck runs.

Reports are jinja templates expanded with the fields of a
:obj:`scale.qc.check.CheckReport`. A falsified run can also be dumped as a
standalone reproduction script, which is the same script the
:obj:`scale.qc.sandbox.ScriptSandbox` runs.

"""
from pathlib import Path
import math
import numpy as np
import scale.qc.internal as internal
from scale.qc.core import TemplateManager
from scale.qc.outcome import describe

__all__ = ["render", "input_literal", "script_renderer", "write_failed_file"]


def render(report, template: str = "report.jt.txt") -> str:
    """Render a report with a named template."""
    data = {
        "status": report.status,
        "tests_run": report.tests_run,
        "seed": report.seed,
        "shrinks": report.shrinks,
        "shown_input": report.shown_input,
        "outcome": "" if report.outcome is None else describe(report.outcome),
        "error": report.error,
    }
    return TemplateManager().expand(template, data)


def input_literal(x) -> str:
    """Python source text that evaluates to ``x``.

    Containers are rendered element by element so that non-finite floats nested
    anywhere come out as ``float('nan')``, ``float('inf')`` or ``float('-inf')``.

    Examples:

        >>> input_literal([1, -2.5])
        '[1, -2.5]'
        >>> input_literal(np.array([1.0, 2.0]))
        "np.array([1.0, 2.0], dtype='float64')"
        >>> input_literal((float("nan"), -float("inf")))
        "(float('nan'), float('-inf'))"

    """
    if isinstance(x, np.ndarray):
        return f"np.array({input_literal(x.tolist())}, dtype={str(x.dtype)!r})"
    if isinstance(x, float) and not math.isfinite(x):
        return f"float({repr(float(x))!r})"
    if type(x) is list:
        return "[" + ", ".join(input_literal(y) for y in x) + "]"
    if type(x) is tuple:
        items = [input_literal(y) for y in x]
        if len(items) == 1:
            return f"({items[0]},)"
        return "(" + ", ".join(items) + ")"
    if type(x) is dict:
        items = (f"{input_literal(k)}: {input_literal(v)}" for k, v in x.items())
        return "{" + ", ".join(items) + "}"
    return repr(x)


def script_renderer(target: str, seed=None, test_case=None, template="repro.jt.py"):
    """Return a function rendering the reproduction script of an input.

    Args:
        target: module:name of a :obj:`scale.qc.check.Check` or of a property.
        seed: Seed to record in the script.
        test_case: Test case index to record in the script.
        template: Name of the template to expand.

    """
    tm = TemplateManager()

    def render_script(x) -> str:
        return tm.expand(
            template,
            {
                "target": target,
                "input": input_literal(x),
                "seed": seed,
                "test_case": test_case,
            },
        )

    return render_script


def write_failed_file(report, path, target: str):
    """Write a script reproducing the minimized counterexample of ``report``."""
    text = script_renderer(target, seed=report.seed, test_case=report.tests_run)(
        report.value
    )
    path = Path(path)
    internal.logger.info("Writing failed test case", failed_file=str(path))
    with open(path, "w") as f:
        f.write(text)
    return path
