"""Tests for the fault policy."""

import warnings

import pytest

from oasgen.errors import OasgenError, ProcessorLookupError
from oasgen.faults import (AnnotationWarning, FaultPolicy, Severity,
                           severity_for, severity_label)


@pytest.mark.parametrize(
    "code, label",
    [
        (Severity.ERROR, "Error"),
        (Severity.CORE_ERROR, "Error"),
        (Severity.COMPILE_ERROR, "Error"),
        (Severity.USER_ERROR, "Error"),
        (Severity.RECOVERABLE_ERROR, "Error"),
        (Severity.WARNING, "Warning"),
        (Severity.CORE_WARNING, "Warning"),
        (Severity.COMPILE_WARNING, "Warning"),
        (Severity.USER_WARNING, "Warning"),
        (Severity.PARSE, "Parser error"),
        (Severity.NOTICE, "Notice"),
        (Severity.USER_NOTICE, "Notice"),
        (Severity.STRICT, "Strict"),
        (Severity.DEPRECATED, "Deprecated"),
        (Severity.USER_DEPRECATED, "Deprecated"),
        (3, "Error"),
        (1 << 20, "Error"),
    ],
)
def test_severity_label(code, label):
    assert severity_label(code) == label


@pytest.mark.parametrize(
    "category, severity",
    [
        (DeprecationWarning, Severity.DEPRECATED),
        (FutureWarning, Severity.DEPRECATED),
        (SyntaxWarning, Severity.PARSE),
        (RuntimeWarning, Severity.WARNING),
        (ResourceWarning, Severity.NOTICE),
        (UnicodeWarning, Severity.STRICT),
        (UserWarning, Severity.USER_WARNING),
    ],
)
def test_severity_for_categories(category, severity):
    assert severity_for(category("message"), category) is severity


def test_annotation_warning_carries_its_severity():
    warning = AnnotationWarning("bad", Severity.USER_ERROR)

    assert severity_for(warning, AnnotationWarning) is Severity.USER_ERROR
    assert AnnotationWarning("default").severity is Severity.USER_WARNING


def test_non_fatal_warning_is_logged(diagnostics, console_buffer):
    policy = FaultPolicy(diagnostics)

    with policy.installed():
        warnings.warn("heads up", RuntimeWarning)

    assert diagnostics.called()
    assert console_buffer.getvalue() == "Warning: heads up\n"


def test_debug_mode_shows_warning_location(diagnostics, console_buffer):
    diagnostics.debug = True
    policy = FaultPolicy(diagnostics)

    with policy.installed():
        warnings.warn_explicit(AnnotationWarning("odd"), AnnotationWarning, "api.py", 7)

    assert console_buffer.getvalue() == "Warning: odd in api.py on line 7\n"


def test_every_occurrence_is_reported(diagnostics):
    policy = FaultPolicy(diagnostics)

    with policy.installed():
        for _ in range(2):
            warnings.warn("again", UserWarning)

    assert len(diagnostics.diagnostics) == 2


def test_fatal_warning_exits_with_its_code(diagnostics, console_buffer):
    policy = FaultPolicy(diagnostics)

    with pytest.raises(SystemExit) as excinfo:
        with policy.installed():
            warnings.warn(AnnotationWarning("cannot continue", Severity.USER_ERROR))
            pytest.fail("fatal warning did not stop the block")

    assert excinfo.value.code == 256
    assert console_buffer.getvalue() == "Error: cannot continue\n"


def test_suppressed_severities_are_skipped(diagnostics, console_buffer):
    policy = FaultPolicy(diagnostics, error_reporting=Severity.ALL & ~Severity.DEPRECATED)

    with policy.installed():
        warnings.warn("old api", DeprecationWarning)

    assert not diagnostics.called()
    assert console_buffer.getvalue() == ""


def test_suppressed_fatal_warning_does_not_exit(diagnostics):
    policy = FaultPolicy(diagnostics, error_reporting=Severity.WARNING)

    with policy.installed():
        warnings.warn(AnnotationWarning("ignored", Severity.USER_ERROR))

    assert not diagnostics.called()


def test_uncaught_exception_exits_with_one(diagnostics, console_buffer):
    policy = FaultPolicy(diagnostics)

    with pytest.raises(SystemExit) as excinfo:
        with policy.installed():
            raise RuntimeError("kaput")

    assert excinfo.value.code == 1
    assert console_buffer.getvalue() == "Error: kaput\n"


def test_uncaught_exception_uses_its_exit_code(diagnostics):
    class Unavailable(OasgenError):
        exit_code = 69

    with pytest.raises(SystemExit) as excinfo:
        with FaultPolicy(diagnostics).installed():
            raise Unavailable("service unavailable")

    assert excinfo.value.code == 69


def test_exception_without_message_logs_its_name(diagnostics, console_buffer):
    with pytest.raises(SystemExit):
        with FaultPolicy(diagnostics).installed():
            raise KeyError()

    assert console_buffer.getvalue() == "Error: KeyError\n"


def test_lookup_error_message(diagnostics, console_buffer):
    with pytest.raises(SystemExit) as excinfo:
        with FaultPolicy(diagnostics).installed():
            raise ProcessorLookupError("Unknown processor: nope")

    assert excinfo.value.code == 1
    assert "Error: Unknown processor: nope" in console_buffer.getvalue()


def test_system_exit_passes_through(diagnostics):
    with pytest.raises(SystemExit) as excinfo:
        with FaultPolicy(diagnostics).installed():
            raise SystemExit(3)

    assert excinfo.value.code == 3
    assert not diagnostics.called()


def test_handlers_are_scoped(diagnostics):
    original = warnings.showwarning
    policy = FaultPolicy(diagnostics)

    with policy.installed():
        assert warnings.showwarning == policy.handle_warning

    assert warnings.showwarning is original
