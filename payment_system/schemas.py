"""
Pydantic schemas for the ledger's serialized formats
"""

import json
from decimal import Decimal
from typing import Any, Dict, Mapping, Union

from pydantic import (
    BaseModel, ConfigDict, Field, StrictStr, ValidationError, field_validator
)

from .accounts import Account
from .errors import MalformedRequest


class TransferRequest(BaseModel):
    """Transfer request: ``{"from": ..., "to": ..., "amount": ...}``"""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    source: StrictStr = Field(..., alias="from", description="Source account id")
    destination: StrictStr = Field(..., alias="to", description="Destination account id")
    amount: Decimal = Field(..., description="Amount to move")

    @field_validator("amount", mode="before")
    @classmethod
    def amount_must_be_number(cls, value: Any) -> Any:
        # JSON numbers only; "500" and true are type errors
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            raise ValueError("amount must be a number")
        if isinstance(value, float):
            return Decimal(str(value))
        return value


class AccountInfo(BaseModel):
    """Account record as it appears in the accounts snapshot"""
    id: str
    balance: Decimal
    active: bool

    @classmethod
    def from_account(cls, account: Account) -> 'AccountInfo':
        return cls(id=account.id, balance=account.balance, active=account.active)


def decode_transfer_request(payload: Union[str, bytes, Mapping[str, Any]]) -> TransferRequest:
    """
    Decode a serialized transfer request

    Args:
        payload: JSON text/bytes or an already decoded mapping

    Returns:
        Validated TransferRequest

    Raises:
        MalformedRequest: If the payload is not valid JSON or does not match
            the request shape
    """
    if isinstance(payload, (str, bytes, bytearray)):
        try:
            # parse_float keeps JSON numbers exact
            data = json.loads(payload, parse_float=Decimal)
        except ValueError as e:
            raise MalformedRequest(f"Transfer request is not valid JSON: {e}", payload=payload)
    elif isinstance(payload, Mapping):
        data = dict(payload)
    else:
        raise MalformedRequest(
            f"Transfer request must be JSON or a mapping, got {type(payload).__name__}",
            payload=payload
        )

    if not isinstance(data, dict):
        raise MalformedRequest("Transfer request must be a JSON object", payload=payload)

    try:
        return TransferRequest.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(part) for part in error["loc"]) or "request"
            for error in e.errors()
        )
        raise MalformedRequest(f"Invalid transfer request fields: {fields}", payload=payload)


def accounts_snapshot(accounts: Dict[str, Account]) -> str:
    """Serialize accounts as a JSON object keyed by account id, sorted by id"""
    snapshot = {
        account_id: AccountInfo.from_account(accounts[account_id]).model_dump(mode="json")
        for account_id in sorted(accounts)
    }
    return json.dumps(snapshot)
