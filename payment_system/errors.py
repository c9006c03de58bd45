"""
Ledger Errors

Every failure the ledger reports is a PaymentSystemError subclass with a
stable ``code`` that outer layers (the HTTP API) map to their own responses.
"""

from decimal import Decimal
from typing import Any, Optional


class PaymentSystemError(Exception):
    """Base class for all ledger errors"""
    code = "payment_system_error"

    def __init__(self, message: str, account_id: Optional[str] = None,
                 amount: Optional[Decimal] = None):
        super().__init__(message)
        self.message = message
        self.account_id = account_id
        self.amount = amount

    def to_dict(self) -> dict:
        result = {"error": self.code, "detail": self.message}
        if self.account_id is not None:
            result["account_id"] = self.account_id
        if self.amount is not None:
            result["amount"] = str(self.amount)
        return result


class InvalidSourceAccount(PaymentSystemError):
    """Source account is missing, inactive or lacks funds"""
    code = "invalid_source_account"


class InvalidDestinationAccount(PaymentSystemError):
    """Destination account is missing or inactive"""
    code = "invalid_destination_account"


class MalformedRequest(PaymentSystemError, ValueError):
    """Serialized transfer request could not be decoded"""
    code = "malformed_request"

    def __init__(self, message: str, payload: Any = None):
        super().__init__(message)
        self.payload = payload


class InvalidAmount(PaymentSystemError, ValueError):
    """Amount is not a finite number in the accepted range"""
    code = "invalid_amount"


class InvalidAccountId(PaymentSystemError, ValueError):
    code = "invalid_account_id"


class AccountAlreadyExists(PaymentSystemError):
    code = "account_already_exists"


class AccountNotFound(PaymentSystemError, KeyError):
    code = "account_not_found"

    # KeyError quotes its message in str(); keep the plain text
    def __str__(self) -> str:
        return self.message


class ReservedAccount(PaymentSystemError):
    """Operation is not allowed on the emission or destruction account"""
    code = "reserved_account"
