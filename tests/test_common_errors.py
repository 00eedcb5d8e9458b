from morphsync_request.common.errors import AppError, Severity, ErrorKind


def test_app_error_includes_metadata_in_str():
    err = AppError("boom", Severity.ABORT, ErrorKind.HTTP)
    message = str(err)
    assert "ABORT" in message and "HTTP" in message
    assert err.severity is Severity.ABORT
    assert err.kind is ErrorKind.HTTP


def test_app_error_defaults_to_warn_unknown():
    cause = RuntimeError("root cause")
    err = AppError("boom", original_exception=cause)
    assert err.severity is Severity.WARN
    assert err.kind is ErrorKind.UNKNOWN
    assert err.original_exception is cause
