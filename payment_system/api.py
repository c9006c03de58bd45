"""
Payment System HTTP API

FastAPI application exposing the ledger operations. The ledger itself is
created per application, so tests can build an isolated app each time.
"""

from typing import Optional
import uuid

from fastapi import Depends, FastAPI, HTTPException, Request, status
from pydantic import BaseModel, Field
import uvicorn

from . import __version__
from .config import get_config
from .errors import (
    AccountAlreadyExists, AccountNotFound, InvalidAccountId, InvalidAmount,
    InvalidDestinationAccount, InvalidSourceAccount, MalformedRequest,
    PaymentSystemError, ReservedAccount
)
from .ledger import PaymentSystem
from .logging_config import correlation_context, setup_logging
from .schemas import AccountInfo


CORRELATION_HEADER = "X-Correlation-ID"

# Error kind -> HTTP status
ERROR_STATUS = {
    InvalidSourceAccount: 422,
    InvalidDestinationAccount: 422,
    MalformedRequest: status.HTTP_400_BAD_REQUEST,
    InvalidAmount: status.HTTP_400_BAD_REQUEST,
    InvalidAccountId: status.HTTP_400_BAD_REQUEST,
    ReservedAccount: status.HTTP_400_BAD_REQUEST,
    AccountAlreadyExists: status.HTTP_409_CONFLICT,
    AccountNotFound: status.HTTP_404_NOT_FOUND,
}


class OpenAccountRequest(BaseModel):
    account_id: str = Field(..., description="IBAN-like account identifier")


class AmountRequest(BaseModel):
    amount: str = Field(..., description="Decimal amount as string")


def get_payment_system(request: Request) -> PaymentSystem:
    """Ledger bound to the running application"""
    return request.app.state.payment_system


def to_http_error(error: PaymentSystemError) -> HTTPException:
    status_code = ERROR_STATUS.get(type(error), status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=status_code, detail=error.to_dict())


def create_app(payment_system: Optional[PaymentSystem] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    config = get_config()
    app = FastAPI(
        title=config.api_title,
        description="Closed-loop ledger with emission, destruction and transfers",
        version=__version__
    )
    app.state.payment_system = payment_system or PaymentSystem(config=config)

    @app.middleware("http")
    async def correlation_middleware(request: Request, call_next):
        """Bind the caller's correlation id (or a fresh one) to ledger logs"""
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        with correlation_context(correlation_id):
            response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "version": __version__}

    @app.get("/accounts")
    async def get_accounts(system: PaymentSystem = Depends(get_payment_system)):
        """Snapshot of every account keyed by id"""
        return {
            account_id: AccountInfo.from_account(account).model_dump(mode="json")
            for account_id, account in sorted(system.get_accounts_snapshot().items())
        }

    @app.get("/accounts/{account_id}")
    async def get_account(account_id: str, system: PaymentSystem = Depends(get_payment_system)):
        """Get account details"""
        account = system.get_account(account_id)
        if not account:
            raise to_http_error(
                AccountNotFound(f"Account {account_id} not found", account_id=account_id)
            )
        return AccountInfo.from_account(account).model_dump(mode="json")

    @app.post("/accounts", status_code=status.HTTP_201_CREATED)
    async def open_account(
        request: OpenAccountRequest,
        system: PaymentSystem = Depends(get_payment_system)
    ):
        """Open a new account"""
        try:
            account = system.open_account(request.account_id)
        except PaymentSystemError as e:
            raise to_http_error(e)
        return AccountInfo.from_account(account).model_dump(mode="json")

    @app.post("/accounts/{account_id}/deactivate")
    async def deactivate_account(account_id: str, system: PaymentSystem = Depends(get_payment_system)):
        try:
            account = system.deactivate_account(account_id)
        except PaymentSystemError as e:
            raise to_http_error(e)
        return AccountInfo.from_account(account).model_dump(mode="json")

    @app.post("/accounts/{account_id}/activate")
    async def activate_account(account_id: str, system: PaymentSystem = Depends(get_payment_system)):
        try:
            account = system.activate_account(account_id)
        except PaymentSystemError as e:
            raise to_http_error(e)
        return AccountInfo.from_account(account).model_dump(mode="json")

    @app.post("/emission")
    async def emit_money(request: AmountRequest, system: PaymentSystem = Depends(get_payment_system)):
        """Create money on the emission account"""
        try:
            account = system.emit_money(request.amount)
        except PaymentSystemError as e:
            raise to_http_error(e)
        return AccountInfo.from_account(account).model_dump(mode="json")

    @app.post("/destruction")
    async def destroy_money(request: AmountRequest, system: PaymentSystem = Depends(get_payment_system)):
        """Record destroyed money on the destruction account"""
        try:
            account = system.destroy_money(request.amount)
        except PaymentSystemError as e:
            raise to_http_error(e)
        return AccountInfo.from_account(account).model_dump(mode="json")

    @app.post("/transfers")
    async def transfer(request: Request, system: PaymentSystem = Depends(get_payment_system)):
        """Execute a transfer request: {"from": ..., "to": ..., "amount": ...}"""
        body = await request.body()
        try:
            system.transfer_money_from_request(body)
        except PaymentSystemError as e:
            raise to_http_error(e)
        return {"status": "completed"}

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: bool = False):
    """Run the FastAPI server"""
    config = get_config()
    setup_logging(config.log_level, fmt=config.log_format)
    uvicorn.run(
        create_app(),
        host=host or config.api_host,
        port=port or config.api_port,
        log_level="debug" if debug else "info"
    )
