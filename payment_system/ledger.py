"""
Payment System Ledger

Owns the account registry, the reserved emission and destruction accounts
and the transfer engine. Every mutation of the registry goes through the
storage backend; transfers run inside a storage transaction so either both
balance changes land or neither does.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Union

from .accounts import Account
from .config import PaymentSystemConfig, get_config
from .errors import (
    AccountAlreadyExists, AccountNotFound, InvalidAccountId,
    InvalidDestinationAccount, InvalidSourceAccount, PaymentSystemError,
    ReservedAccount
)
from .logging_config import get_logger, log_action
from .money import AmountLike, ZERO, require_non_negative, require_positive, to_amount
from .schemas import accounts_snapshot, decode_transfer_request
from .storage import InMemoryStorage, StorageInterface


class PaymentSystemInterface(ABC):
    """Operations a payment system ledger offers to its callers"""

    @abstractmethod
    def open_account(self, account_id: str) -> Account:
        pass

    @abstractmethod
    def emit_money(self, amount: AmountLike) -> Account:
        pass

    @abstractmethod
    def destroy_money(self, amount: AmountLike) -> Account:
        pass

    @abstractmethod
    def transfer_money(self, from_id: str, to_id: str, amount: AmountLike) -> None:
        pass

    @abstractmethod
    def transfer_money_from_request(self, request: Union[str, bytes, Mapping[str, Any]]) -> None:
        pass

    @abstractmethod
    def get_accounts_info(self) -> str:
        pass


class PaymentSystem(PaymentSystemInterface):
    """
    In-process ledger over a storage backend

    A new instance starts with exactly the emission and destruction accounts,
    both active with zero balance. Instances share nothing, so tests can
    build as many as they need.
    """

    def __init__(
        self,
        storage: Optional[StorageInterface] = None,
        config: Optional[PaymentSystemConfig] = None
    ):
        self.config = config or get_config()
        self.storage = storage or InMemoryStorage()
        self.accounts_table = "accounts"
        self.totals_table = "ledger_totals"
        self.precision = self.config.amount_precision
        self.logger = get_logger("paysys.ledger")

        self._emission_account = self.config.emission_account
        self._destruction_account = self.config.destruction_account
        if self._emission_account == self._destruction_account:
            raise ValueError("Emission and destruction accounts must differ")

        with self.storage.atomic():
            for account_id in (self._emission_account, self._destruction_account):
                self._save_account(Account(id=account_id))
            self._save_totals(ZERO, ZERO)

    @property
    def emission_account(self) -> str:
        """Id of the account that receives emitted money"""
        return self._emission_account

    @property
    def destruction_account(self) -> str:
        """Id of the account that accumulates destroyed money"""
        return self._destruction_account

    def is_reserved(self, account_id: str) -> bool:
        return account_id in (self._emission_account, self._destruction_account)

    def open_account(self, account_id: str) -> Account:
        """
        Open a new active account with zero balance

        Raises:
            InvalidAccountId: If the id is not a non-empty string
            AccountAlreadyExists: If the id is already registered
        """
        if not isinstance(account_id, str) or not account_id.strip():
            raise InvalidAccountId(f"Account id must be a non-empty string, got {account_id!r}")

        if self.storage.exists(self.accounts_table, account_id):
            log_action(
                self.logger, "warning", "Account already exists",
                action="open_account", resource=account_id
            )
            raise AccountAlreadyExists(
                f"Account {account_id} already exists", account_id=account_id
            )

        account = Account(id=account_id)
        self._save_account(account)

        log_action(
            self.logger, "info", "Account opened",
            action="open_account", resource=account_id
        )
        return account

    def emit_money(self, amount: AmountLike) -> Account:
        """
        Create money on the emission account

        Raises:
            InvalidAmount: If amount is not a finite positive number
        """
        value = require_positive(to_amount(amount, self.precision))
        with self.storage.atomic():
            account = self._credit_reserved(self._emission_account, value)
            emitted, destroyed = self._load_totals()
            self._save_totals(emitted + value, destroyed)

        log_action(
            self.logger, "info", "Money emitted",
            action="emit_money", resource=self._emission_account,
            extra={"amount": str(value), "balance": str(account.balance)}
        )
        return account

    def destroy_money(self, amount: AmountLike) -> Account:
        """
        Record destroyed money on the destruction account

        No other account is debited; the destruction account accumulates the
        destroyed volume.

        Raises:
            InvalidAmount: If amount is not a finite positive number
        """
        value = require_positive(to_amount(amount, self.precision))
        with self.storage.atomic():
            account = self._credit_reserved(self._destruction_account, value)
            emitted, destroyed = self._load_totals()
            self._save_totals(emitted, destroyed + value)

        log_action(
            self.logger, "info", "Money destroyed",
            action="destroy_money", resource=self._destruction_account,
            extra={"amount": str(value), "balance": str(account.balance)}
        )
        return account

    def transfer_money(self, from_id: str, to_id: str, amount: AmountLike) -> None:
        """
        Move ``amount`` from one account to another

        Both accounts must exist and be active, and the source must hold at
        least ``amount``. A failed transfer changes nothing.

        Raises:
            InvalidAmount: If amount is negative or not a finite number
            InvalidSourceAccount: Source missing, inactive or short of funds
            InvalidDestinationAccount: Destination missing or inactive
        """
        value = require_non_negative(to_amount(amount, self.precision))

        try:
            with self.storage.atomic():
                source = self._load_account(from_id)
                if source is None or not source.can_debit(value):
                    raise InvalidSourceAccount(
                        self._source_problem(from_id, source, value),
                        account_id=from_id, amount=value
                    )

                destination = self._load_account(to_id)
                if destination is None or not destination.can_credit():
                    problem = "does not exist" if destination is None else "is inactive"
                    raise InvalidDestinationAccount(
                        f"Destination account {to_id} {problem}",
                        account_id=to_id, amount=value
                    )

                if source.balance < value:
                    raise InvalidSourceAccount(
                        f"Not enough money on {from_id} for transfer",
                        account_id=from_id, amount=value
                    )

                source.balance -= value
                self._save_account(source)

                # Reload so a transfer to the same account sees the debit
                destination = self._load_account(to_id)
                destination.balance += value
                self._save_account(destination)
        except PaymentSystemError as e:
            log_action(
                self.logger, "warning", f"Transfer rejected: {e.message}",
                action="transfer_money", resource=from_id,
                extra={"to": to_id, "amount": str(value), "error": e.code}
            )
            raise

        log_action(
            self.logger, "info", "Transfer completed",
            action="transfer_money", resource=from_id,
            extra={"to": to_id, "amount": str(value)}
        )

    def transfer_money_from_request(self, request: Union[str, bytes, Mapping[str, Any]]) -> None:
        """
        Decode a serialized transfer request and execute it

        Raises:
            MalformedRequest: If the request cannot be decoded
            plus anything transfer_money raises
        """
        try:
            transfer = decode_transfer_request(request)
        except PaymentSystemError as e:
            log_action(
                self.logger, "warning", f"Transfer request rejected: {e.message}",
                action="transfer_money_from_request", extra={"error": e.code}
            )
            raise

        self.transfer_money(transfer.source, transfer.destination, transfer.amount)

    def get_accounts_info(self) -> str:
        """JSON snapshot of every account, keyed by account id"""
        return accounts_snapshot(self.get_accounts_snapshot())

    def get_accounts_snapshot(self) -> Dict[str, Account]:
        """Copies of every account keyed by id"""
        records = self.storage.load_all(self.accounts_table)
        accounts = [Account.from_dict(data) for data in records]
        return {account.id: account for account in accounts}

    def get_account(self, account_id: str) -> Optional[Account]:
        """Get a copy of an account by id"""
        return self._load_account(account_id)

    def get_balance(self, account_id: str) -> Decimal:
        account = self._load_account(account_id)
        if account is None:
            raise AccountNotFound(f"Account {account_id} not found", account_id=account_id)
        return account.balance

    def deactivate_account(self, account_id: str) -> Account:
        """
        Mark an account inactive so it rejects transfers

        Raises:
            AccountNotFound: If the account does not exist
            ReservedAccount: For the emission or destruction account
        """
        if self.is_reserved(account_id):
            raise ReservedAccount(
                f"Reserved account {account_id} cannot be deactivated",
                account_id=account_id
            )
        return self._set_active(account_id, False)

    def activate_account(self, account_id: str) -> Account:
        """Mark an account active again"""
        return self._set_active(account_id, True)

    @property
    def total_emitted(self) -> Decimal:
        return self._load_totals()[0]

    @property
    def total_destroyed(self) -> Decimal:
        return self._load_totals()[1]

    def total_balance(self) -> Decimal:
        """Sum of all account balances"""
        return sum(
            (account.balance for account in self.get_accounts_snapshot().values()),
            ZERO
        )

    def check_conservation(self) -> bool:
        """
        Verify that transfers neither created nor destroyed money

        The sum of all balances must equal everything emitted plus everything
        destroyed, since destruction accumulates on its own account.
        """
        emitted, destroyed = self._load_totals()
        total = self.total_balance()
        balanced = total == emitted + destroyed
        if not balanced:
            log_action(
                self.logger, "error", "Ledger conservation check failed",
                action="check_conservation",
                extra={
                    "total_balance": str(total),
                    "total_emitted": str(emitted),
                    "total_destroyed": str(destroyed)
                }
            )
        return balanced

    def _source_problem(self, account_id: str, account: Optional[Account],
                        amount: Decimal) -> str:
        if account is None:
            return f"Source account {account_id} does not exist"
        if not account.active:
            return f"Source account {account_id} is inactive"
        return f"Source account {account_id} has insufficient funds for {amount}"

    def _credit_reserved(self, account_id: str, amount: Decimal) -> Account:
        account = self._load_account(account_id)
        account.balance += amount
        self._save_account(account)
        return account

    def _set_active(self, account_id: str, active: bool) -> Account:
        account = self._load_account(account_id)
        if account is None:
            raise AccountNotFound(f"Account {account_id} not found", account_id=account_id)

        if account.active != active:
            account.active = active
            self._save_account(account)
            log_action(
                self.logger, "info",
                "Account activated" if active else "Account deactivated",
                action="activate_account" if active else "deactivate_account",
                resource=account_id
            )
        return account

    def _load_totals(self):
        data = self.storage.load(self.totals_table, "totals")
        return Decimal(data['emitted']), Decimal(data['destroyed'])

    def _save_totals(self, emitted: Decimal, destroyed: Decimal) -> None:
        self.storage.save(self.totals_table, "totals", {
            'emitted': str(emitted),
            'destroyed': str(destroyed)
        })

    def _save_account(self, account: Account) -> None:
        """Save account to storage"""
        self.storage.save(self.accounts_table, account.id, account.to_dict())

    def _load_account(self, account_id: str) -> Optional[Account]:
        """Load account from storage"""
        if not isinstance(account_id, str):
            return None
        data = self.storage.load(self.accounts_table, account_id)
        if data:
            return Account.from_dict(data)
        return None
