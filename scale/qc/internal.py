"""
This :obj:`scale.qc.internal` module contains functions called from the click-based
command line interface. This is so __main__ contains little logic. There should be no
click dependence here--it should all be in __main__.

------------------------------------------------------------------------------------------
"""

from pathlib import Path
import importlib
import json
import logging
import os
import structlog
import sys

structlog.configure(
    wrapper_class=structlog.make_filtering_bound_logger(
        int(os.environ.get("SCALE_QC_LOG_LEVEL", logging.INFO))
    ),
    logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
)

logger = structlog.get_logger(__name__)


# This is special for the docstring copier below.
from functools import wraps
from typing import Callable, TypeVar, Any, Literal, Optional
from typing_extensions import ParamSpec
import pydantic

T = TypeVar("T")
P = ParamSpec("P")


def copy_doc(
    copy_func: Callable[..., Any]
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Prepends the docstring from another function. This function is intended to
    be used as a decorator.

    Args:
        copy_func (Callable[..., Any]): The function whose docstring should be copied.

    Returns:
        Callable[[Callable[P, T]], Callable[P, T]]: The decorator function.

    Examples:

        Define a function with a docstring.

        >>> def some():
        ...    '''This is a some doc string'''
        ...    return None

        Copy some docstring to pig function.

        >>> @copy_doc(some)
        ... def pig():
        ...    return None

        >>> pig.__doc__
        'This is a some doc string'

    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return func(*args, **kwargs)

        # Remove anything after \f when we copy the docstring as per click rules.
        # The command line docs then stop where the API docs keep going.
        s = copy_func.__doc__
        if not s:
            raise ValueError(
                "@copy_doc({}) will not work because it has an empty docstring!".format(
                    copy_func.__name__
                )
            )
        i = s.find("\f")
        if i >= 0:
            s = s[0:i]
        wrapper.__doc__ = s
        return wrapper

    return decorator


class CheckOptions(pydantic.BaseModel):
    """Options controlling a single quickcheck run.

    Values come from (highest priority first) the command line, a JSON
    configuration file, the environment and finally these defaults.

    Attributes:
        seed: Seed for the random generator. A fresh one is drawn when None.
        max_tests: Number of random inputs to try before declaring success.
        shrink: Whether to minimize a counterexample once found.
        verbose: Log every tested input and every shrink attempt.
        sandbox: Where the property runs, "inprocess" or "process".
        timeout: Wall-clock limit in seconds for one evaluation (process only).
        progress_bar: Show a tqdm progress bar while testing.
        failed_file: Where to write a reproduction script for a counterexample.
    """

    model_config = pydantic.ConfigDict(extra="forbid")

    seed: Optional[int] = None
    max_tests: int = pydantic.Field(default=50, ge=0)
    shrink: bool = True
    verbose: bool = False
    sandbox: Literal["inprocess", "process"] = "inprocess"
    timeout: Optional[float] = pydantic.Field(default=None, gt=0)
    progress_bar: bool = True
    failed_file: Optional[str] = None


def _options_from_env():
    """Collect options set through SCALE_QC_* environment variables."""
    env = {}
    if "SCALE_QC_SEED" in os.environ:
        env["seed"] = int(os.environ["SCALE_QC_SEED"])
        logger.debug("From SCALE_QC_SEED environment variable", seed=env["seed"])
    if "SCALE_QC_MAX_TESTS" in os.environ:
        env["max_tests"] = int(os.environ["SCALE_QC_MAX_TESTS"])
        logger.debug(
            "From SCALE_QC_MAX_TESTS environment variable",
            max_tests=env["max_tests"],
        )
    return env


def _load_config(config_file: str):
    """Load a JSON configuration file.

    The file holds any of the :obj:`CheckOptions` fields plus an optional "check"
    key naming the target as module:name.

    Returns:
        str: the target (or None)
        dict: the option values found in the file
    """
    config_path = Path(config_file).resolve()
    if not config_path.exists():
        raise ValueError(f"Configuration file {config_path} does not exist!")

    logger.info("Loading configuration file", config_file=str(config_path))
    with open(config_path, "r") as f:
        config = json.load(f)
    if not isinstance(config, dict):
        raise ValueError(f"Configuration file {config_path} must hold a JSON object.")

    target = config.pop("check", None)
    return target, config


def _make_options(config_file: Optional[str] = None, **overrides):
    """Merge defaults, environment, config file and overrides into CheckOptions.

    Overrides with a value of None are ignored so unset command line flags do not
    clobber the configuration file.
    """
    data = _options_from_env()
    target = None
    if config_file:
        target, config = _load_config(config_file)
        data.update(config)
    for k, v in overrides.items():
        if v is not None:
            data[k] = v
    options = CheckOptions(**data)
    logger.debug("Final options", **options.model_dump())
    return target, options


def _get_function_handle(mod_fn):
    """Takes module:name like uvw:xyz and returns the object 'xyz' within the module
    'uvw', importing the module if needed."""
    parts = mod_fn.split(":")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ValueError(
            f"The expected form for {mod_fn} is the module_name:object_name, separated by a single colon."
        )

    try:
        this_module = importlib.import_module(parts[0])
    except ImportError as ie:
        raise ValueError(f"Could not import module {parts[0]}: {ie}") from ie

    fn_handle = getattr(this_module, parts[1], None)
    if fn_handle is None:
        raise ValueError(f"Module {parts[0]} has no attribute {parts[1]}.")
    return fn_handle


def schema():
    """Emit the JSON schema of the run options."""
    return CheckOptions.model_json_schema()


def check(
    target: Optional[str],
    max_tests: Optional[int],
    config_file: Optional[str],
    seed: Optional[int],
    shrink: Optional[bool],
    verbose: Optional[bool],
    sandbox: Optional[str],
    timeout: Optional[float],
    failed_file: Optional[str],
    progress_bar: Optional[bool],
):
    """Randomly test a property and shrink any counterexample!

    TARGET names a Check object as module:name, for example
    scale.qc.demo:sum_reverse. MAX_TESTS is the number of random inputs to try.
    Both can also be given in the configuration file, as "check" and "max_tests".

    The exit status is 0 when all tests pass, 1 when a counterexample is found and
    2 when the run is aborted, e.g. because the generator failed.

    \f
    Args:
        target: module:name of the Check to run.

        max_tests: Number of random inputs to try.

        config_file: Optional JSON configuration file.

        seed: Seed for the random generator.

        shrink: Whether to minimize a counterexample.

        verbose: Whether to log every input tried.

        sandbox: Where the property runs, inprocess or process.

        timeout: Time limit for one evaluation in seconds.

        failed_file: Where to write a reproduction script.

        progress_bar: Whether to show a progress bar.

    Returns:
        CheckReport: the result of the run

    """
    import scale.qc.check as qc_check

    config_target, options = _make_options(
        config_file,
        max_tests=max_tests,
        seed=seed,
        shrink=shrink,
        verbose=verbose,
        sandbox=sandbox,
        timeout=timeout,
        failed_file=failed_file,
        progress_bar=progress_bar,
    )
    target = target or config_target
    if not target:
        raise ValueError("No check given! Pass TARGET or set 'check' in the config.")

    obj = _get_function_handle(target)
    if not isinstance(obj, qc_check.Check):
        raise ValueError(f"{target} is a {type(obj).__name__}, expected a Check.")

    result = qc_check.run_check(obj, options, target=target)
    print(result.render(), end="")
    return result


def list_checks(module_name: str):
    """List the checks defined in a module.

    \f
    Args:
        module_name: Module to search for Check objects.

    Returns:
        dict[str,str]: check name to description

    """
    import scale.qc.check as qc_check

    try:
        module = importlib.import_module(module_name)
    except ImportError as ie:
        raise ValueError(f"Could not import module {module_name}: {ie}") from ie

    checks = {}
    for k, v in vars(module).items():
        if isinstance(v, qc_check.Check):
            checks[f"{module_name}:{k}"] = v.description
    return checks
