import scale.qc.internal as internal
import scale.qc.demo as demo
import pydantic
import json
import pytest


def test_get_function_handle():
    """Tests getting an object based on module:name strings as used on the command
    line and in configuration files."""

    c = internal._get_function_handle("scale.qc.demo:sum_reverse")
    assert c is demo.sum_reverse


@pytest.mark.parametrize(
    "bad", ["scale.qc.demo", "scale.qc.demo:", ":x", "a:b:c", "no_such_module_qc:x"]
)
def test_get_function_handle_errors(bad):
    with pytest.raises(ValueError):
        internal._get_function_handle(bad)


def test_get_function_handle_missing_attribute():
    with pytest.raises(ValueError, match="has no attribute"):
        internal._get_function_handle("scale.qc.demo:nothing_here")


def test_copy_doc_stops_at_form_feed():
    @internal.copy_doc(internal.check)
    def f():
        pass

    assert "Randomly test a property" in f.__doc__
    assert "Args:" not in f.__doc__


def test_copy_doc_requires_docstring():
    def undocumented():
        pass

    with pytest.raises(ValueError):
        internal.copy_doc(undocumented)(lambda: None)


class TestOptions:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SCALE_QC_SEED", raising=False)
        monkeypatch.delenv("SCALE_QC_MAX_TESTS", raising=False)
        target, options = internal._make_options()
        assert target is None
        assert options == internal.CheckOptions()
        assert options.max_tests == 50
        assert options.seed is None
        assert options.shrink
        assert options.sandbox == "inprocess"

    def test_validation(self):
        with pytest.raises(pydantic.ValidationError):
            internal.CheckOptions(max_tests=-1)
        with pytest.raises(pydantic.ValidationError):
            internal.CheckOptions(sandbox="thread")
        with pytest.raises(pydantic.ValidationError):
            internal.CheckOptions(timeout=0)
        with pytest.raises(pydantic.ValidationError):
            internal.CheckOptions(colour="blue")
        # Validation errors are reported like other bad input.
        assert issubclass(pydantic.ValidationError, ValueError)

    def test_precedence(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SCALE_QC_SEED", "1")
        monkeypatch.setenv("SCALE_QC_MAX_TESTS", "10")
        config = tmp_path / "run.qc.json"
        config.write_text(
            json.dumps({"check": "scale.qc.demo:reciprocal", "max_tests": 20, "shrink": False})
        )

        target, options = internal._make_options(str(config), max_tests=30, seed=None)
        assert target == "scale.qc.demo:reciprocal"
        # Command line beats config beats environment.
        assert options.max_tests == 30
        assert options.seed == 1
        assert not options.shrink

    def test_env_only(self, monkeypatch):
        monkeypatch.setenv("SCALE_QC_MAX_TESTS", "7")
        _, options = internal._make_options()
        assert options.max_tests == 7

    def test_missing_config(self, tmp_path):
        with pytest.raises(ValueError, match="does not exist"):
            internal._make_options(str(tmp_path / "nope.json"))

    def test_config_must_be_object(self, tmp_path):
        config = tmp_path / "list.qc.json"
        config.write_text("[1, 2]")
        with pytest.raises(ValueError, match="JSON object"):
            internal._load_config(str(config))


def test_schema():
    s = internal.schema()
    assert s["title"] == "CheckOptions"
    assert "max_tests" in s["properties"]
    assert "sandbox" in s["properties"]


def test_list_checks():
    checks = internal.list_checks("scale.qc.demo")
    assert set(checks) == {
        "scale.qc.demo:sum_reverse",
        "scale.qc.demo:double_keeps_sorted",
        "scale.qc.demo:reciprocal",
        "scale.qc.demo:distinct_roles",
    }
    assert checks["scale.qc.demo:sum_reverse"] == demo.sum_reverse.description
    with pytest.raises(ValueError):
        internal.list_checks("no_such_module_qc")


def test_check_rejects_non_check(monkeypatch):
    monkeypatch.delenv("SCALE_QC_SEED", raising=False)
    with pytest.raises(ValueError, match="expected a Check"):
        internal.check(
            "scale.qc.demo:partial", None, None, None, None, None, None, None, None, False
        )


def test_check_needs_target():
    with pytest.raises(ValueError, match="No check given"):
        internal.check(None, None, None, None, None, None, None, None, None, False)
