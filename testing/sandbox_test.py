import scale.qc.sandbox as sandbox
import scale.qc.report as report
from scale.qc.outcome import (
    Crashed,
    Falsified,
    Fault,
    Pass,
    TimedOut,
    boolean_prop,
    describe,
    is_pass,
)
import multiprocessing
import os
import signal
import sys
import time
import pytest

needs_fork = pytest.mark.skipif(
    "fork" not in multiprocessing.get_all_start_methods(),
    reason="closures can only be sent to workers with the fork start method",
)


def is_even(n):
    return n % 2 == 0


def segfault(x):
    os.kill(os.getpid(), signal.SIGSEGV)


def hard_exit(x):
    os._exit(3)


def soft_exit(x):
    sys.exit(3)


def sleepy(x):
    time.sleep(30)
    return Pass()


def unpicklable_outcome(x):
    return Falsified(lambda: x)


class TestOutcome:
    def test_describe(self):
        assert describe(Pass()) == "OK"
        assert describe(Falsified()) == "Falsified"
        assert describe(Falsified("too big")) == "Falsified: too big"
        assert describe(Crashed(Fault("KeyError", "'a'"))) == "Crashed: KeyError: 'a'"
        assert describe(TimedOut(2.5)) == "Timed out after 2.5 s"

    def test_boolean_prop(self):
        prop = boolean_prop(is_even)
        assert prop(2) == Pass()
        assert prop(3) == Falsified()
        assert "is_even" in repr(prop)

    def test_fault_of_exception(self):
        try:
            {}["missing"]
        except KeyError as e:
            fault = Fault.of_exception(e)
        assert fault.kind == "KeyError"
        assert "Traceback" in fault.details
        assert str(fault) == "KeyError: 'missing'"


class TestInProcessSandbox:
    def setup_method(self):
        self.sandbox = sandbox.InProcessSandbox()

    def test_pass_and_falsified(self):
        assert is_pass(self.sandbox.run(boolean_prop(is_even), 4))
        assert self.sandbox.run(boolean_prop(is_even), 5) == Falsified()

    def test_exception_becomes_crash(self):
        outcome = self.sandbox.run(lambda x: 1 // x, 0)
        assert isinstance(outcome, Crashed)
        assert outcome.fault.kind == "ZeroDivisionError"

    def test_sys_exit_becomes_crash(self):
        outcome = self.sandbox.run(soft_exit, 1)
        assert isinstance(outcome, Crashed)
        assert outcome.fault.kind == "SystemExit"
        assert outcome.fault.message == "3"

    def test_keyboard_interrupt_propagates(self):
        def interrupted(x):
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            self.sandbox.run(interrupted, 1)

    def test_bool_results_are_accepted(self):
        assert self.sandbox.run(lambda x: True, 0) == Pass()
        assert self.sandbox.run(lambda x: False, 0) == Falsified()

    def test_non_outcome_result_is_a_crash(self):
        outcome = self.sandbox.run(lambda x: 42, 0)
        assert isinstance(outcome, Crashed)
        assert outcome.fault.kind == "TypeError"


class TestProcessSandbox:
    def test_outcomes_cross_the_process_boundary(self):
        box = sandbox.ProcessSandbox()
        assert box.run(boolean_prop(is_even), 2) == Pass()
        assert box.run(boolean_prop(is_even), 1) == Falsified()

    @needs_fork
    def test_exception_becomes_crash(self):
        outcome = sandbox.ProcessSandbox().run(lambda x: 1 // x, 0)
        assert isinstance(outcome, Crashed)
        assert outcome.fault.kind == "ZeroDivisionError"

    def test_signal_becomes_crash(self):
        outcome = sandbox.ProcessSandbox().run(segfault, None)
        assert isinstance(outcome, Crashed)
        assert outcome.fault.kind == "signal"
        assert "SIGSEGV" in outcome.fault.message
        assert outcome.fault.exitcode == -signal.SIGSEGV

    def test_exit_becomes_crash(self):
        outcome = sandbox.ProcessSandbox().run(hard_exit, None)
        assert isinstance(outcome, Crashed)
        assert outcome.fault.kind == "exit"
        assert outcome.fault.exitcode == 3

    def test_sys_exit_becomes_crash(self):
        outcome = sandbox.ProcessSandbox().run(soft_exit, None)
        assert isinstance(outcome, Crashed)
        assert outcome.fault.kind == "SystemExit"

    def test_timeout(self):
        start = time.monotonic()
        outcome = sandbox.ProcessSandbox(timeout=0.5).run(sleepy, None)
        assert outcome == TimedOut(0.5)
        assert time.monotonic() - start < 20

    def test_unpicklable_outcome_is_reported(self):
        outcome = sandbox.ProcessSandbox().run(unpicklable_outcome, 1)
        assert isinstance(outcome, Crashed)


class TestScriptSandbox:
    def render(self, target):
        return report.script_renderer(target, seed=1, test_case=0)

    def test_pass(self):
        box = sandbox.ScriptSandbox(self.render("scale.qc.demo:sum_reverse"))
        assert box.run(None, [1, 2, 3]) == Pass()

    def test_falsified(self):
        box = sandbox.ScriptSandbox(self.render("scale.qc.demo:double_keeps_sorted"))
        outcome = box.run(None, ([1, 1], 0))
        assert isinstance(outcome, Falsified)
        assert "doubling element 0" in outcome.reason

    def test_non_finite_input_reaches_the_property(self):
        box = sandbox.ScriptSandbox(self.render("scale.qc.demo:sum_reverse"))
        # nan != nan, so the sums never compare equal.
        assert isinstance(box.run(None, [float("nan")]), Falsified)
        assert box.run(None, [float("inf"), 1.0]) == Pass()

    def test_crash(self):
        box = sandbox.ScriptSandbox(self.render("scale.qc.demo:reciprocal"))
        outcome = box.run(None, 0)
        assert isinstance(outcome, Crashed)
        assert "ZeroDivisionError" in outcome.fault.details
        assert outcome.fault.exitcode == 1

    def test_timeout(self):
        box = sandbox.ScriptSandbox(lambda x: "import time\ntime.sleep(30)\n", timeout=0.5)
        assert box.run(None, None) == TimedOut(0.5)

    def test_classify(self):
        classify = sandbox.ScriptSandbox._classify
        assert classify(0, "", "") == Pass()
        assert classify(1, 'noise\n{"falsified": "bad"}\n', "") == Falsified("bad")
        crashed = classify(1, "not json\n", "Traceback")
        assert isinstance(crashed, Crashed)
        assert crashed.fault.details == "Traceback"
        assert classify(-11, "", "").fault.kind == "signal"


def test_make_sandbox():
    assert isinstance(sandbox.make_sandbox("inprocess"), sandbox.InProcessSandbox)
    box = sandbox.make_sandbox("process", timeout=3.0)
    assert isinstance(box, sandbox.ProcessSandbox)
    assert box.timeout == 3.0
    with pytest.raises(ValueError):
        sandbox.make_sandbox("thread")


def test_make_sandbox_warns_about_inprocess_timeout(mocker):
    warning = mocker.patch("scale.qc.internal.logger.warning")
    sandbox.make_sandbox("inprocess", timeout=1.0)
    warning.assert_called_once()
