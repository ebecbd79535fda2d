"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/Operator
  2xxx: Account
  3xxx: Team
  4xxx: Order (40xx validation, 401x business rules)
  5xxx: Fixture
  9xxx: System / external

Integrity guards (double settle, double snapshot, rebuilt week, repeated
credit ref) are reported as outcomes by the services, never raised.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


class ValidationError(AppError):
    """Malformed input, rejected before any side effect."""


class BusinessRuleError(AppError):
    """Well-formed request refused by a rule; no partial mutation."""


class TransientExternalError(AppError):
    """An external collaborator is unavailable; retried on the next cycle."""


# --- 1xxx: Auth/Operator ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired token", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class OperatorAuthError(AppError):
    def __init__(self) -> None:
        super().__init__(1010, "Operator credentials required", 403)


# --- 2xxx: Account ---

class InsufficientBalanceError(BusinessRuleError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required} cents, available {available} cents",
            422,
        )


class AccountNotFoundError(BusinessRuleError):
    def __init__(self, user_id: str) -> None:
        super().__init__(2002, f"Account not found for user {user_id}", 404)


class InvalidAmountError(ValidationError):
    def __init__(self, amount: int) -> None:
        super().__init__(2003, f"Amount must be positive, got {amount}", 400)


# --- 3xxx: Team ---

class TeamNotFoundError(BusinessRuleError):
    def __init__(self, team_id: int) -> None:
        super().__init__(3001, f"Team not found: {team_id}", 404)


class InsufficientSharesError(BusinessRuleError):
    def __init__(self, team_id: int, requested: int) -> None:
        super().__init__(
            3002, f"Team {team_id} has fewer than {requested} shares available", 422
        )


# --- 4xxx: Order ---

class InvalidQuantityError(ValidationError):
    def __init__(self, quantity: int, maximum: int) -> None:
        super().__init__(4001, f"Quantity {quantity} must be in [1, {maximum}]", 400)


class InvalidIdentifierError(ValidationError):
    def __init__(self, field: str, value: object) -> None:
        super().__init__(4002, f"Malformed {field}: {value!r}", 400)


class InvalidPriceError(ValidationError):
    def __init__(self, price: int) -> None:
        super().__init__(4003, f"Quoted price must be positive, got {price}", 400)


class WindowClosedError(BusinessRuleError):
    def __init__(self, team_id: int, reason: str) -> None:
        super().__init__(4010, f"Trading closed for team {team_id}: {reason}", 422)


class PriceMismatchError(BusinessRuleError):
    def __init__(self, quoted: int, current: int) -> None:
        super().__init__(
            4011,
            f"Price changed: quoted {quoted} cents, current {current} cents",
            409,
        )


# --- 5xxx: Fixture ---

class FixtureNotFoundError(BusinessRuleError):
    def __init__(self, fixture_id: str) -> None:
        super().__init__(5001, f"Fixture not found: {fixture_id}", 404)


# --- 6xxx: Leaderboard ---

class InvalidWeekError(ValidationError):
    def __init__(self, week_start: object, week_end: object) -> None:
        super().__init__(
            6001,
            f"Not a leaderboard week: {week_start!s} -> {week_end!s}",
            400,
        )


class WeekNotEndedError(BusinessRuleError):
    def __init__(self, week_end: object) -> None:
        super().__init__(6002, f"Week has not ended yet (ends {week_end!s})", 409)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class FeedUnavailableError(TransientExternalError):
    def __init__(self, detail: str) -> None:
        super().__init__(9003, f"Match feed unavailable: {detail}", 503)
