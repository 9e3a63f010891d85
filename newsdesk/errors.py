"""
Failure types raised by the operation layer.

Every failure carries a stable ``code`` that clients can branch on, an
``http_status`` used by the REST surface, and an optional ``field``
naming the offending input for validation failures.
"""


class OperationError(Exception):
    code = "INTERNAL_ERROR"
    http_status = 500

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        data = {"message": self.message, "code": self.code}
        if self.field is not None:
            data["field"] = self.field
        return data


class ValidationFailed(OperationError):
    code = "BAD_USER_INPUT"
    http_status = 400

    @classmethod
    def from_errors(cls, errors: list[dict]) -> "ValidationFailed":
        """Report the first pydantic error, naming the field it hit."""
        first = errors[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        message = first["msg"].removeprefix("Value error, ")
        return cls(f"{field}: {message}" if field else message, field=field)


class AuthenticationFailed(OperationError):
    code = "UNAUTHENTICATED"
    http_status = 401


class PermissionDenied(OperationError):
    code = "FORBIDDEN"
    http_status = 403


class NotFound(OperationError):
    code = "NOT_FOUND"
    http_status = 404


class UnknownOperation(OperationError):
    code = "UNKNOWN_OPERATION"
    http_status = 400


# Shared by "no such user" and "wrong password" so login never reveals
# which accounts exist.
INVALID_CREDENTIALS = "Invalid credentials"
