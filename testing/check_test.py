import scale.qc.check as check
import scale.qc.demo as demo
import scale.qc.internal as internal
from scale.qc.outcome import Crashed, Falsified, Pass, boolean_prop, is_pass, no_shrink
from scale.qc.sandbox import InProcessSandbox, ProcessSandbox
import scale.qc.generate.numeric as numeric
import scale.qc.generate.collection as collection
from functools import partial
import sys
import pytest


def run_demo(c, max_tests=50, seed=42, **kwargs):
    a = c.arbitrary
    return check.quickcheck(
        a.gen, a.shrink, c.prop, max_tests, seed=seed, progress_bar=False, **kwargs
    )


def broken_gen(ctx):
    if ctx.size >= 3:
        raise RuntimeError("generator bug")
    return ctx.size


class TestQuickcheck:
    def test_true_property_passes(self):
        r = run_demo(demo.sum_reverse)
        assert r.status == "passed"
        assert r.passed
        assert r.tests_run == 50
        assert r.seed == 42
        assert r.exit_code == check.EXIT_PASSED

    def test_discrete_roles_never_collide(self):
        assert run_demo(demo.distinct_roles, max_tests=200).passed

    def test_false_property_is_falsified_and_minimized(self):
        r = run_demo(demo.double_keeps_sorted)
        assert r.status == "falsified"
        assert r.exit_code == check.EXIT_FALSIFIED
        assert r.seed == 42
        assert r.tests_run < 50

        prop = demo.double_keeps_sorted.prop
        shrink = demo.double_keeps_sorted.arbitrary.shrink
        assert not is_pass(prop(r.original))
        assert not is_pass(prop(r.value))
        assert r.outcome == prop(r.value)
        # Local minimality: every candidate of the result passes.
        for candidate in shrink(r.value):
            assert is_pass(prop(candidate))

        xs, i = r.value
        assert len(xs) == 2
        assert i == 0
        assert 0 < xs[0] <= xs[1] < 2 * xs[0]
        assert r.shown_input == repr(r.value)

    @pytest.mark.parametrize("seed", range(1, 11))
    def test_sorted_counterexample_has_two_elements(self, seed):
        r = run_demo(demo.double_keeps_sorted, max_tests=200, seed=seed)
        assert r.status == "falsified"
        xs, i = r.value
        assert len(xs) == 2
        assert xs == sorted(xs)

    def test_same_seed_same_result(self):
        a = run_demo(demo.double_keeps_sorted, seed=1234)
        b = run_demo(demo.double_keeps_sorted, seed=1234)
        assert (a.tests_run, a.original, a.value, a.shrinks) == (
            b.tests_run,
            b.original,
            b.value,
            b.shrinks,
        )

    def test_crash_is_a_failure(self):
        r = run_demo(demo.reciprocal)
        assert r.status == "falsified"
        assert r.value == 0
        assert isinstance(r.outcome, Crashed)
        assert r.outcome.fault.kind == "ZeroDivisionError"

    def test_sys_exit_is_a_failure(self):
        def prop(n):
            if n >= 4:
                sys.exit(f"too big: {n}")
            return Pass()

        r = check.quickcheck(
            numeric.gen_nat, numeric.shrink_nat, prop, 100, seed=3, progress_bar=False
        )
        assert r.status == "falsified"
        assert r.value == 4
        assert r.outcome.fault.kind == "SystemExit"
        assert r.outcome.fault.message == "too big: 4"

    def test_long_counterexample_is_minimized(self):
        r = check.quickcheck(
            collection.gen_list(numeric.gen_nat),
            partial(collection.shrink_list, numeric.shrink_nat),
            boolean_prop(lambda xs: len(xs) < 200),
            400,
            seed=1,
            progress_bar=False,
        )
        assert r.status == "falsified"
        assert len(r.original) >= 200
        assert r.value == [0] * 200

    def test_size_grows_with_test_index(self):
        sizes = []

        def gen(ctx):
            sizes.append(ctx.size)
            return 0

        check.quickcheck(gen, no_shrink, lambda x: Pass(), 5, seed=0, progress_bar=False)
        assert sizes == [0, 1, 2, 3, 4]

    def test_zero_tests(self):
        r = check.quickcheck(numeric.gen_int, numeric.shrink_int, lambda x: Pass(), 0, seed=0)
        assert r.passed
        assert r.tests_run == 0

    def test_fresh_seed_is_reported(self):
        r = check.quickcheck(
            numeric.gen_int, numeric.shrink_int, lambda x: Pass(), 3, progress_bar=False
        )
        assert isinstance(r.seed, int)
        assert 0 <= r.seed < 2**30

    def test_no_shrink_skips_minimization(self, mocker):
        spy = mocker.patch("scale.qc.check.minimize")
        r = check.quickcheck(
            numeric.gen_int,
            no_shrink,
            boolean_prop(lambda n: n == 0),
            50,
            seed=5,
            progress_bar=False,
        )
        spy.assert_not_called()
        assert r.status == "falsified"
        assert r.shrinks == 0
        assert r.value == r.original

    def test_do_shrink_false(self):
        r = run_demo(demo.double_keeps_sorted, do_shrink=False)
        assert r.shrinks == 0
        assert r.value == r.original

    def test_generator_failure(self):
        with pytest.raises(check.GeneratorFailure) as e:
            check.quickcheck(broken_gen, no_shrink, lambda x: Pass(), 10, seed=3)
        assert e.value.tests_run == 3
        assert e.value.seed == 3
        assert isinstance(e.value.__cause__, RuntimeError)
        assert "generator bug" in str(e.value)

    def test_process_sandbox(self):
        r = run_demo(demo.reciprocal, sandbox=ProcessSandbox())
        assert r.status == "falsified"
        assert r.value == 0
        assert r.outcome.fault.kind == "ZeroDivisionError"

    def test_verbose_logs_inputs(self, mocker):
        info = mocker.patch("scale.qc.internal.logger.info")
        check.quickcheck(
            numeric.gen_int,
            no_shrink,
            lambda x: Pass(),
            3,
            seed=0,
            verbose=True,
            progress_bar=False,
        )
        assert sum(1 for c in info.call_args_list if c.args == ("Testing",)) == 3


class TestRunCheck:
    def test_passed(self):
        options = internal.CheckOptions(seed=42, max_tests=50, progress_bar=False)
        r = check.run_check(demo.sum_reverse, options)
        assert r.exit_code == 0

    def test_generator_failure_aborts(self):
        c = check.Check("broken", check.Arbitrary(gen=broken_gen), lambda x: Pass())
        options = internal.CheckOptions(seed=7, progress_bar=False)
        r = check.run_check(c, options)
        assert r.status == "aborted"
        assert r.exit_code == check.EXIT_ABORTED
        assert r.seed == 7
        assert r.tests_run == 3
        assert "generator bug" in r.error
        assert "Aborted after 3 test(s)" in r.render()

    def test_failed_file(self, tmp_path):
        path = tmp_path / "repro.py"
        options = internal.CheckOptions(
            seed=42, progress_bar=False, failed_file=str(path)
        )
        r = check.run_check(
            demo.double_keeps_sorted, options, target="scale.qc.demo:double_keeps_sorted"
        )
        assert r.status == "falsified"
        text = path.read_text()
        assert "scale.qc.demo:double_keeps_sorted" in text
        assert repr(r.value) in text
        assert "random seed 42" in text

    def test_failed_file_needs_target(self, tmp_path, mocker):
        warning = mocker.patch("scale.qc.internal.logger.warning")
        path = tmp_path / "repro.py"
        options = internal.CheckOptions(
            seed=42, progress_bar=False, failed_file=str(path)
        )
        check.run_check(demo.reciprocal, options)
        assert not path.exists()
        assert any("reproduction" in c.args[0] for c in warning.call_args_list)

    def test_process_sandbox_option(self, mocker):
        spy = mocker.spy(check, "make_sandbox")
        options = internal.CheckOptions(
            seed=1, max_tests=5, sandbox="process", timeout=10.0, progress_bar=False
        )
        r = check.run_check(demo.sum_reverse, options)
        spy.assert_called_once_with("process", 10.0)
        assert r.passed
