"""
Domain errors raised by the service layer.
Each error carries the HTTP status the API layer answers with.
"""


class ExpenseTrackerError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ExpenseTrackerError):
    status_code = 404


class ConflictError(ExpenseTrackerError):
    status_code = 409


class InvalidRequestError(ExpenseTrackerError):
    status_code = 400


class AuthenticationError(ExpenseTrackerError):
    status_code = 401


class PermissionDeniedError(ExpenseTrackerError):
    status_code = 403


class ReportGenerationError(ExpenseTrackerError):
    status_code = 502
