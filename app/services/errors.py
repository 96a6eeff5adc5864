"""Service errors - every failure a transfer or lookup can report to the caller"""


class LedgerServiceError(Exception):
    """Base class for errors reported to API callers"""
    code = "LEDGER_ERROR"
    http_status = 400
    default_message = "Request could not be completed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> dict:
        return {
            "success": False,
            "error": self.code,
            "message": self.message,
        }


class UnauthenticatedError(LedgerServiceError):
    """Raised when the bearer credential does not resolve to an account"""
    code = "UNAUTHENTICATED"
    http_status = 401
    default_message = "Unauthorized"


class InvalidAmountError(LedgerServiceError):
    """Raised when an amount is not positive, too precise or above the ceiling"""
    code = "INVALID_AMOUNT"
    default_message = "Invalid amount"


class RecipientNotFoundError(LedgerServiceError):
    """Raised when the recipient email has no account"""
    code = "RECIPIENT_NOT_FOUND"
    http_status = 404
    default_message = "Recipient not found"


class SelfTransferError(LedgerServiceError):
    """Raised when a user tries to send funds to their own email"""
    code = "SELF_TRANSFER"
    default_message = "Cannot send funds to yourself"


class InsufficientBalanceError(LedgerServiceError):
    """Raised when an account has insufficient balance"""
    code = "INSUFFICIENT_BALANCE"
    default_message = "Insufficient balance"


class AccountNotFoundError(LedgerServiceError):
    """Raised when an account lookup by id or email finds nothing"""
    code = "ACCOUNT_NOT_FOUND"
    http_status = 404
    default_message = "User not found"


class StoreUnavailableError(LedgerServiceError):
    """Raised on transient database failures; no mutation was committed"""
    code = "STORE_UNAVAILABLE"
    http_status = 503
    default_message = "Service temporarily unavailable, please retry"


class IdempotencyKeyReusedError(LedgerServiceError):
    """Raised when an idempotency key is sent again with a different request"""
    code = "IDEMPOTENCY_KEY_REUSED"
    http_status = 409
    default_message = "Idempotency key was already used for a different request"
