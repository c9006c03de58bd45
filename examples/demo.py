#!/usr/bin/env python3
"""
Example: Emission and a JSON transfer

Opens two accounts, emits money and moves part of it out of the emission
account with a serialized transfer request, printing the accounts snapshot
after each step.
"""

import os
import sys
import json

# Add the package to the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from payment_system.config import get_config
from payment_system.errors import PaymentSystemError
from payment_system.ledger import PaymentSystem
from payment_system.logging_config import setup_logging
from payment_system.money import format_amount


def main():
    config = get_config()
    setup_logging(config.log_level, fmt=config.log_format)

    system = PaymentSystem(config=config)
    system.open_account("BY12345678901234567890123456")
    system.open_account("BY98765432109876543210987654")
    print("Initial accounts info:", system.get_accounts_info())

    system.emit_money(1000)
    print("After emission:", system.get_accounts_info())

    transfer_json = json.dumps({
        "from": system.emission_account,
        "to": "BY12345678901234567890123456",
        "amount": 500
    })
    try:
        system.transfer_money_from_request(transfer_json)
    except PaymentSystemError as e:
        print(f"Transfer failed: {e}")
    print("After transfer:", system.get_accounts_info())

    print()
    for account_id, account in sorted(system.get_accounts_snapshot().items()):
        print(f"{account_id}  {format_amount(account.balance, config.amount_precision):>12}  "
              f"{'active' if account.active else 'inactive'}")


if __name__ == "__main__":
    main()
