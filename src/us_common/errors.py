"""Domain exceptions and their HTTP status mapping.

Status mapping:
  400: ValidationFailedError (carries one "field: message" entry per field)
  401: UnauthorizedError
  403: AccessDeniedError
  404: NotFoundError
  409: AlreadyExistsError
  500: InternalError

Services raise these at the point of detection; src/main.py translates
them into the ApiError body. They are never retried.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        message: str,
        http_status: int = 500,
        errors: list[str] | None = None,
    ) -> None:
        self.message = message
        self.http_status = http_status
        self.errors = errors
        super().__init__(message)


class NotFoundError(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class AlreadyExistsError(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class AccessDeniedError(AppError):
    def __init__(self, action: str) -> None:
        super().__init__(f"Access denied: you can only {action}", 403)


class UnauthorizedError(AppError):
    def __init__(self, message: str = "Invalid or missing JWT token") -> None:
        super().__init__(message, 401)


class ValidationFailedError(AppError):
    def __init__(self, errors: list[str], message: str = "Validation error") -> None:
        super().__init__(message, 400, errors)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(detail, 500)


# --- Message builders (wording shared by services and tests) ---

def user_not_found(user_id: int) -> NotFoundError:
    return NotFoundError(f"User id={user_id} not found")


def user_email_not_found(email: str) -> NotFoundError:
    return NotFoundError(f"User email={email} not found")


def user_credentials_not_found(credentials_id: int) -> NotFoundError:
    return NotFoundError(f"User with credentials id={credentials_id} not found")


def card_not_found(card_id: int) -> NotFoundError:
    return NotFoundError(f"Card id={card_id} not found")
