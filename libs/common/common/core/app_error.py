from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from common.utils.json_model import JsonModel


class ErrorDetails(JsonModel):
    scope: str
    code: str
    message: str
    details: dict[str, Any] | None = None

    def to_response(self) -> dict[str, Any]:
        """Body returned to API clients: ``{error, scope, code}`` plus optional details."""
        return {"error": self.message, **self.to_dict(mode="json", exclude={"message"})}


class ErrorConfig(JsonModel):
    scope: str
    code: str
    default_message: str
    http_status: int | None = None
    retryable: bool = False

    def create(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        http_status: int | None = None,
        cause: BaseException | None = None,
        retryable: bool | None = None,
    ) -> AppException:
        msg = message if message is not None else self.default_message
        http = http_status if http_status is not None else self.http_status
        retry = self.retryable if retryable is None else retryable

        # If the cause is also an AppException, keep its identity and merge details
        if isinstance(cause, AppException):
            scope = cause.details.scope
            code = cause.details.code
            http = cause.http_status
            retry = cause.retryable
            if details and cause.details.details:
                details = {**cause.details.details, **details}
            elif cause.details.details:
                details = cause.details.details
            if cause.details.message:
                msg = f"{msg}: {cause.details.message}" if msg else cause.details.message
        else:
            scope = self.scope
            code = self.code

        app_error = AppError(
            details=ErrorDetails(scope=scope, code=code, message=msg, details=details),
            http_status=http,
            cause=cause,
            retryable=retry,
        )
        return AppException(app_error)

    def is_(self, error: BaseException) -> bool:
        return AppException.is_(error, self)


class Errors:
    class Generic:
        INVALID_INPUT = ErrorConfig(scope="generic", code="invalid_input", default_message="Invalid input", http_status=400)
        MISSING_FIELD = ErrorConfig(scope="generic", code="missing_field", default_message="Missing required field", http_status=400)
        UNAUTHORIZED = ErrorConfig(scope="generic", code="unauthorized", default_message="Unauthorized", http_status=401)
        NOT_FOUND = ErrorConfig(scope="generic", code="not_found", default_message="Not found", http_status=404)
        INTERNAL_ERROR = ErrorConfig(scope="generic", code="internal_error", default_message="Internal error", http_status=500)

    class Config:
        NOT_CONFIGURED = ErrorConfig(scope="config", code="not_configured", default_message="Not configured", http_status=500)
        STRIPE_NOT_CONFIGURED = ErrorConfig(scope="config", code="stripe_not_configured", default_message="Stripe not configured", http_status=500)
        DATABASE_NOT_CONFIGURED = ErrorConfig(
            scope="config", code="database_not_configured", default_message="Database not configured", http_status=500
        )
        ADMIN_NOT_CONFIGURED = ErrorConfig(
            scope="config", code="admin_not_configured", default_message="Admin API not configured", http_status=500
        )

    class Paywall:
        NOT_FOUND = ErrorConfig(scope="paywall", code="not_found", default_message="Paywall not found or inactive", http_status=404)
        SLUG_TAKEN = ErrorConfig(scope="paywall", code="slug_taken", default_message="A paywall with this slug already exists", http_status=409)
        INVALID_REFERENCE = ErrorConfig(
            scope="paywall", code="invalid_reference", default_message="Linked course or cohort does not exist", http_status=400
        )
        INVALID_NAME = ErrorConfig(
            scope="paywall", code="invalid_name", default_message="Paywall name must contain letters or digits", http_status=400
        )

    class Checkout:
        GATEWAY_ERROR = ErrorConfig(scope="checkout", code="gateway_error", default_message="Payment gateway error", http_status=500)

    class Webhook:
        INVALID_SIGNATURE = ErrorConfig(scope="webhook", code="invalid_signature", default_message="Invalid signature", http_status=400)
        INVALID_PAYLOAD = ErrorConfig(scope="webhook", code="invalid_payload", default_message="Invalid payload", http_status=400)
        PAYMENT_NOT_RECORDED = ErrorConfig(
            scope="webhook", code="payment_not_recorded", default_message="Failed to record payment", http_status=500, retryable=True
        )

    class Email:
        INVALID_TYPE = ErrorConfig(scope="email", code="invalid_type", default_message="Invalid email type", http_status=400)
        COURSE_NOT_FOUND = ErrorConfig(scope="email", code="course_not_found", default_message="Course not found", http_status=404)
        SEND_FAILED = ErrorConfig(scope="email", code="send_failed", default_message="Failed to send email", http_status=500)


class AppError(BaseModel):
    model_config = {"arbitrary_types_allowed": True}

    details: ErrorDetails = Field(..., description="Error details")
    http_status: int | None = Field(default=None, description="HTTP status code")
    retryable: bool = Field(default=False, description="Whether the error is retryable")
    cause: BaseException | None = Field(default=None, description="Underlying cause")


class AppException(Exception):
    """Exception wrapper for AppError that can be raised."""

    def __init__(self, app_error: AppError) -> None:
        self.app_error = app_error
        super().__init__(app_error.details.message)

    @property
    def details(self) -> ErrorDetails:
        return self.app_error.details

    @property
    def http_status(self) -> int | None:
        return self.app_error.http_status

    @property
    def retryable(self) -> bool:
        return self.app_error.retryable

    @property
    def cause(self) -> BaseException | None:
        return self.app_error.cause

    @staticmethod
    def is_any_of(error: BaseException, *errors: ErrorConfig) -> bool:
        return any(AppException.is_(error, e) for e in errors)

    @staticmethod
    def is_(error: BaseException, error_config: ErrorConfig) -> bool:
        return isinstance(error, AppException) and error.details.scope == error_config.scope and error.details.code == error_config.code
