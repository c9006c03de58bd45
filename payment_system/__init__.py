"""
Payment System Ledger

A minimal closed-loop ledger with reserved emission and destruction
accounts, atomic transfers between accounts and exact Decimal balances.
"""

__version__ = "1.0.0"

from .errors import (
    PaymentSystemError, InvalidSourceAccount, InvalidDestinationAccount,
    MalformedRequest, InvalidAmount, InvalidAccountId, AccountAlreadyExists,
    AccountNotFound, ReservedAccount
)
from .accounts import Account
from .ledger import PaymentSystemInterface, PaymentSystem
