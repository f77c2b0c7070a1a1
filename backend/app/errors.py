"""
Service error taxonomy. Routes never build error bodies themselves: app.main maps every AppError
to {"error": {"code", "message", "details"?}} with the class's HTTP status.
NotFoundError is used for both "absent" and "owned by someone else" so existence never leaks.
"""
from pydantic import ValidationError as PydanticValidationError


class AppError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: list[dict] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body: dict = {"code": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return {"error": body}


class ValidationError(AppError):
    """Malformed or out-of-range input. details lists every failing field, not just the first."""
    status_code = 400
    code = "VALIDATION_ERROR"

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError, message: str = "Invalid input data") -> "ValidationError":
        return cls(message, details=pydantic_error_details(exc.errors()))


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"


class QuotaExceededError(AppError):
    status_code = 429
    code = "RATE_LIMIT_EXCEEDED"

    def __init__(self, message: str, retry_after: int):
        super().__init__(message)
        self.retry_after = retry_after


class ProviderUnavailableError(AppError):
    """Timeout, transport failure, provider 429/5xx. Safe for the client to retry."""
    status_code = 503
    code = "SERVICE_UNAVAILABLE"


class ProviderTimeoutError(ProviderUnavailableError):
    pass


class ProviderContractError(AppError):
    """Provider answered, but with output we cannot accept (bad JSON, wrong count, invalid fields)."""
    status_code = 502
    code = "PROVIDER_CONTRACT_ERROR"


class InternalError(AppError):
    status_code = 500
    code = "INTERNAL_ERROR"


def pydantic_error_details(errors) -> list[dict]:
    """Flatten pydantic / FastAPI error dicts into [{field, message}]."""
    details = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        msg = err.get("msg", "")
        # Strip pydantic's "Value error, " prefix from custom validator messages
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        details.append({"field": ".".join(loc) or "unknown", "message": msg})
    return details


def validate_model(model_cls, data):
    """Validate a raw payload into model_cls, raising ValidationError with every failing field."""
    if isinstance(data, model_cls):
        return data
    try:
        return model_cls.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e


class AuthenticationError(AppError):
    """Missing, invalid or expired Bearer token."""
    status_code = 401
    code = "UNAUTHORIZED"
