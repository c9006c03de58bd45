#!/usr/bin/env python3
"""
Payment System Entry Point

Starts the FastAPI server with a fresh in-memory ledger.
"""

import sys

from payment_system.api import run_server
from payment_system.config import get_config


if __name__ == "__main__":
    config = get_config()
    print("Starting Payment System ledger...")
    print(f"Emission account:    {config.emission_account}")
    print(f"Destruction account: {config.destruction_account}")
    print(f"API available at: http://localhost:{config.api_port}")
    print(f"Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server()
    except KeyboardInterrupt:
        print("\nShutting down Payment System...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
