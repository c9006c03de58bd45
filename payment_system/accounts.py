"""
Account Records

An account is an IBAN-like identifier, a Decimal balance and an active
flag. Records are plain values: the ledger stores them through the storage
backend and hands callers copies only.
"""

from decimal import Decimal
from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class Account:
    """Ledger account"""
    id: str
    balance: Decimal = Decimal('0')
    active: bool = True

    def __post_init__(self):
        if not isinstance(self.balance, Decimal):
            self.balance = Decimal(str(self.balance))

    def can_debit(self, amount: Decimal) -> bool:
        """Check if account can be the source of a transfer of ``amount``"""
        return self.active and self.balance >= amount

    def can_credit(self) -> bool:
        """Check if account can receive a transfer"""
        return self.active

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        return {
            'id': self.id,
            'balance': str(self.balance),
            'active': self.active
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Account':
        """Create instance from dictionary"""
        return cls(
            id=data['id'],
            balance=Decimal(data['balance']),
            active=bool(data['active'])
        )
