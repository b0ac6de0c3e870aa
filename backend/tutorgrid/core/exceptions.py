class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class AssignmentValidationError(AppError):
    """Raised when an assignment would double-book a teacher or student."""
    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__(
            f"Validation failed: {', '.join(self.errors)}",
            status_code=400,
            details={"errors": self.errors},
        )

class ConstraintViolationError(AppError):
    """Raised when the booking constraint rejects a write the validator did not catch."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)

class InvalidRequestError(AppError):
    """Raised when an operation receives arguments it cannot act on."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)
