import scale.qc.report as report
from scale.qc.check import CheckReport
from scale.qc.outcome import Crashed, Falsified, Fault
import math
import numpy as np


def test_render_passed():
    text = CheckReport(status="passed", tests_run=50, seed=42).render()
    assert text == "+++ OK, passed 50 tests.\n"


def test_render_falsified():
    r = CheckReport(
        status="falsified",
        tests_run=3,
        seed=42,
        shrinks=4,
        original=[9, 9],
        value=[1, 1],
        outcome=Falsified("bad"),
        shown_input="[1, 1]",
    )
    lines = r.render().splitlines()
    assert lines == [
        "*** Failed! Falsifiable (after 3 test(s) and 4 shrink(s)):",
        "[1, 1]",
        "Outcome: Falsified: bad",
        "Random seed: 42",
    ]


def test_render_crashed():
    r = CheckReport(
        status="falsified",
        tests_run=0,
        seed=1,
        value=0,
        outcome=Crashed(Fault("ZeroDivisionError", "division by zero")),
        shown_input="0",
    )
    assert "Outcome: Crashed: ZeroDivisionError: division by zero" in r.render()


def test_render_aborted():
    r = CheckReport(status="aborted", tests_run=2, seed=9, error="boom")
    assert r.render().splitlines() == [
        "*** Aborted after 2 test(s): boom",
        "Random seed: 9",
    ]


def test_input_literal_round_trips_through_eval():
    for x in [[1, -2], (3, [4.5]), "text", None, {"a": 1}]:
        assert eval(report.input_literal(x)) == x
    a = np.array([1.5, -2.0])
    b = eval(report.input_literal(a), {"np": np})
    assert np.array_equal(a, b)
    assert b.dtype == a.dtype


def test_input_literal_of_non_finite_floats():
    x = [1.0, float("inf"), (-float("inf"), float("nan"))]
    text = report.input_literal(x)
    assert text == "[1.0, float('inf'), (float('-inf'), float('nan'))]"
    y = eval(text)
    assert y[:2] == x[:2]
    assert y[2][0] == -math.inf
    assert math.isnan(y[2][1])
    assert eval(report.input_literal((1,))) == (1,)

    a = np.array([[0.5, np.nan], [np.inf, -np.inf]])
    b = eval(report.input_literal(a), {"np": np})
    assert np.array_equal(a, b, equal_nan=True)
    assert b.dtype == a.dtype


def test_script_renderer_with_non_finite_input():
    render = report.script_renderer("scale.qc.demo:sum_reverse")
    text = render([float("nan"), 2.0])
    assert "x = [float('nan'), 2.0]\n" in text
    compile(text, "repro.py", "exec")


def test_script_renderer():
    render = report.script_renderer("scale.qc.demo:reciprocal", seed=5, test_case=2)
    text = render(0)
    assert '_get_function_handle("scale.qc.demo:reciprocal")' in text
    assert "x = 0\n" in text
    assert "random seed 5, test case 2" in text
    compile(text, "repro.py", "exec")


def test_script_renderer_without_seed():
    text = report.script_renderer("m:f")([1])
    assert "random seed" not in text


def test_write_failed_file(tmp_path):
    r = CheckReport(status="falsified", tests_run=1, seed=3, value=[2])
    path = report.write_failed_file(r, tmp_path / "f.py", "scale.qc.demo:sum_reverse")
    assert path.exists()
    assert "x = [2]" in path.read_text()
