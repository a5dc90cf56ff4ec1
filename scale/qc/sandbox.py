"""
Sandboxes run a property on one input and turn any fault into an outcome value.

The driver and the minimizer never call a property directly. They go through a
sandbox, whose :code:`run(prop, x)` always returns an
:obj:`scale.qc.outcome.Outcome` and never raises because of the code under test.

- :obj:`InProcessSandbox` catches exceptions. Cheap, but a segfault or a hang in
  the code under test takes the driver down with it.
- :obj:`ProcessSandbox` evaluates each input in a fresh worker process. Abnormal
  termination of the worker becomes :obj:`scale.qc.outcome.Crashed` and an optional
  wall-clock limit becomes :obj:`scale.qc.outcome.TimedOut`.
- :obj:`ScriptSandbox` writes a standalone Python script for each input and runs
  it with the current interpreter. The same script can be handed to a user as a
  reproduction of a counterexample.

"""
import json
import multiprocessing
import os
from pathlib import Path
import signal
import subprocess
import sys
import tempfile
from typing import Callable, Optional
from scale.qc.outcome import Fault, Pass, Falsified, Crashed, TimedOut, Outcome
import scale.qc.internal as internal

__all__ = ["InProcessSandbox", "ProcessSandbox", "ScriptSandbox", "make_sandbox"]

_OUTCOME_TYPES = (Pass, Falsified, Crashed, TimedOut)


def _as_outcome(result) -> Outcome:
    """Accept booleans from simple properties and reject anything else."""
    if isinstance(result, _OUTCOME_TYPES):
        return result
    if isinstance(result, bool):
        return Pass() if result else Falsified()
    return Crashed(
        Fault(
            kind="TypeError",
            message=f"property returned {type(result).__name__}, expected an outcome",
        )
    )


class InProcessSandbox:
    """Evaluate the property in the calling process.

    A property calling :func:`sys.exit` crashes like one raising any other
    exception. KeyboardInterrupt is not caught.

    Examples:

        >>> InProcessSandbox().run(lambda x: 1 // x, 0)  # doctest: +ELLIPSIS
        Crashed(fault=Fault(kind='ZeroDivisionError', ...))

    """

    def run(self, prop, x) -> Outcome:
        try:
            result = prop(x)
        except (Exception, SystemExit) as exn:
            return Crashed(Fault.of_exception(exn))
        return _as_outcome(result)


def _fault_of_exitcode(exitcode: Optional[int]) -> Fault:
    if exitcode is not None and exitcode < 0:
        try:
            name = signal.Signals(-exitcode).name
        except ValueError:
            name = str(-exitcode)
        return Fault(
            kind="signal", message=f"worker killed by {name}", exitcode=exitcode
        )
    return Fault(
        kind="exit",
        message=f"worker exited with code {exitcode} before reporting",
        exitcode=exitcode,
    )


def _worker(conn, prop, x):
    outcome = InProcessSandbox().run(prop, x)
    try:
        conn.send(outcome)
    except Exception as exn:
        # The outcome itself could not be pickled, report why instead.
        conn.send(Crashed(Fault.of_exception(exn)))
    finally:
        conn.close()


class ProcessSandbox:
    """Evaluate the property in a worker process, one process per input.

    The property and the input are sent to the worker, so with the "spawn" start
    method they must be picklable. On platforms that have it, "fork" is used.

    Args:
        timeout: Wall-clock limit in seconds for one evaluation, or None to wait
            forever.
        start_method: multiprocessing start method, default "fork" if available.

    """

    def __init__(self, timeout: Optional[float] = None, start_method: str = None):
        if start_method is None:
            methods = multiprocessing.get_all_start_methods()
            start_method = "fork" if "fork" in methods else "spawn"
        self.timeout = timeout
        self.start_method = start_method
        self._ctx = multiprocessing.get_context(start_method)

    def run(self, prop, x) -> Outcome:
        recv_conn, send_conn = self._ctx.Pipe(duplex=False)
        worker = self._ctx.Process(
            target=_worker, args=(send_conn, prop, x), daemon=True
        )
        worker.start()
        send_conn.close()

        outcome = None
        try:
            # A dead worker makes the pipe readable (EOF) so this cannot hang
            # on a crash, only on a hung worker without a timeout.
            if recv_conn.poll(self.timeout):
                try:
                    outcome = recv_conn.recv()
                except EOFError:
                    outcome = None
            else:
                internal.logger.debug("Worker timed out", timeout=self.timeout)
                worker.kill()
                worker.join()
                return TimedOut(self.timeout)
        finally:
            recv_conn.close()

        worker.join()
        if outcome is None:
            return Crashed(_fault_of_exitcode(worker.exitcode))
        return outcome


class ScriptSandbox:
    """Run each input as a standalone Python script in a subprocess.

    ``render(x)`` returns the source of a script that evaluates the property on
    ``x``. The script must exit 0 when the property holds and, when it does not,
    print a JSON object with a "falsified" key as its last line of output and exit
    1. Any other termination (uncaught exception, signal) is a crash. The
    property passed to :meth:`run` is not used, the script names it itself; see
    :func:`scale.qc.report.script_renderer`.

    Args:
        render: Callable returning script text for an input.
        timeout: Wall-clock limit in seconds for one script, or None.
        python: Interpreter used to run the script.

    """

    def __init__(
        self,
        render: Callable[[object], str],
        timeout: Optional[float] = None,
        python: str = sys.executable,
    ):
        self.render = render
        self.timeout = timeout
        self.python = python

    @staticmethod
    def _child_env():
        # Let the script import whatever the driver can import.
        env = os.environ.copy()
        paths = [p for p in sys.path if p]
        if "PYTHONPATH" in env:
            paths.append(env["PYTHONPATH"])
        env["PYTHONPATH"] = os.pathsep.join(paths)
        return env

    @staticmethod
    def _classify(returncode: int, stdout: str, stderr: str) -> Outcome:
        if returncode == 0:
            return Pass()
        lines = stdout.strip().splitlines()
        if returncode == 1 and lines:
            try:
                data = json.loads(lines[-1])
            except json.JSONDecodeError:
                data = None
            if isinstance(data, dict) and "falsified" in data:
                return Falsified(data["falsified"])
        fault = _fault_of_exitcode(returncode)
        return Crashed(
            Fault(
                kind=fault.kind,
                message=f"script exited with code {returncode}",
                details=stderr,
                exitcode=returncode,
            )
        )

    def run(self, prop, x) -> Outcome:
        text = self.render(x)
        with tempfile.TemporaryDirectory() as td:
            script = Path(td) / "qc_script.py"
            with open(script, "w") as f:
                f.write(text)
            try:
                result = subprocess.run(
                    [self.python, str(script)],
                    cwd=td,
                    env=self._child_env(),
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                )
            except subprocess.TimeoutExpired:
                internal.logger.debug("Script timed out", timeout=self.timeout)
                return TimedOut(self.timeout)
        return self._classify(result.returncode, result.stdout, result.stderr)


def make_sandbox(kind: str, timeout: Optional[float] = None):
    """Create a sandbox by name, "inprocess" or "process"."""
    if kind == "inprocess":
        if timeout is not None:
            internal.logger.warning(
                "The inprocess sandbox cannot enforce a timeout", timeout=timeout
            )
        return InProcessSandbox()
    elif kind == "process":
        return ProcessSandbox(timeout=timeout)
    raise ValueError(f"sandbox={kind} must be one of: inprocess, process")
