"""Error Hierarchy - codes, statuses and the REST envelope."""

from timetrack.core.errors import (
    AlreadyStartedError, DatabaseError, ErrorCategory, InvalidTimeRangeError,
    InvariantViolationError, NotStartedError, ResourceNotFoundError,
)


def test_already_started_is_recoverable_conflict():
    err = AlreadyStartedError(42, 7)
    assert err.code == "ALREADY_STARTED"
    assert err.http_status == 409
    assert err.category == ErrorCategory.CONFLICT
    assert err.is_domain_error
    assert err.context.user_id == 42
    assert err.context.task_id == 7
    assert err.context.operation == "start"


def test_not_started_is_recoverable_conflict():
    err = NotStartedError(42, 7)
    assert err.code == "NOT_STARTED"
    assert err.http_status == 409
    assert err.is_domain_error
    assert err.context.operation == "stop"


def test_invalid_time_range_maps_to_422():
    err = InvalidTimeRangeError("from must not be after to")
    assert err.http_status == 422
    assert err.is_domain_error


def test_not_found_maps_to_404():
    err = ResourceNotFoundError("Task", "3")
    assert err.http_status == 404
    assert err.message == "Task '3' not found"


def test_database_error_is_critical_and_keeps_operation():
    err = DatabaseError("Connection or operational error", "begin_interval")
    assert err.http_status == 503
    assert not err.is_domain_error
    assert err.operation == "begin_interval"
    assert err.context.operation == "begin_interval"


def test_invariant_violation_is_not_a_domain_error():
    err = InvariantViolationError("2 open intervals for one key")
    assert err.http_status == 500
    assert not err.is_domain_error


def test_to_response_envelope():
    body = AlreadyStartedError(42, 7).to_response()
    assert body["error"]["code"] == "ALREADY_STARTED"
    assert body["error"]["category"] == "conflict"
    assert body["error"]["severity"] == "info"
    assert body["error"]["context"] == {
        "user_id": 42, "task_id": 7, "operation": "start",
    }
    assert "timestamp" in body["error"]
