from tutorgrid.core.exceptions import (
    AppError,
    AssignmentValidationError,
    ConstraintViolationError,
    InvalidRequestError,
    ResourceNotFoundError,
)


def test_assignment_validation_error_structure():
    err = AssignmentValidationError(["Teacher A is busy", "Student B is busy"])
    assert err.status_code == 400
    assert err.message == "Validation failed: Teacher A is busy, Student B is busy"
    assert err.details == {"errors": ["Teacher A is busy", "Student B is busy"]}
    assert isinstance(err, AppError)


def test_app_error_defaults():
    err = AppError("Generic error")
    assert err.status_code == 500
    assert err.details == {}


def test_status_codes():
    assert ConstraintViolationError("taken").status_code == 409
    assert InvalidRequestError("bad").status_code == 400
    missing = ResourceNotFoundError("Assignment", 7)
    assert missing.status_code == 404
    assert missing.message == "Assignment with id 7 not found"
