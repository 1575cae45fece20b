"""
Hosted wallet CLI - inspect wallets, list addresses and unspents, broadcast transactions.
"""

from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import typer
from loguru import logger

from hostwallet.config import Settings, get_settings
from hostwallet.errors import WalletError
from hostwallet.keychains import KeychainService
from hostwallet.transport import HttpTransport
from hostwallet.wallet import Wallet

T = TypeVar("T")

app = typer.Typer(
    name="hostwallet",
    help="Hosted multi-key wallet client",
    add_completion=False,
)


def setup_logging(level: str = "INFO") -> None:
    """Configure loguru logging."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, sort_keys=True))


def _run_with_wallet(
    wallet_id: str,
    api_url: str | None,
    access_token: str | None,
    log_level: str | None,
    action: Callable[[Wallet], Awaitable[T]],
) -> T:
    """Set up logging and transport, fetch the wallet and run action on it."""
    settings: Settings = get_settings()
    setup_logging(log_level or settings.log_level)

    async def _run() -> T:
        transport = HttpTransport(
            api_url=api_url or settings.api_url,
            access_token=access_token or settings.access_token or None,
            timeout=settings.request_timeout,
        )
        async with transport:
            keychains = KeychainService(transport, cache=settings.cache_keychains)
            wallet = await Wallet.fetch(transport, wallet_id, keychains=keychains)
            return await action(wallet)

    try:
        return asyncio.run(_run())
    except WalletError as e:
        logger.error(f"{type(e).__name__}: {e}")
        raise typer.Exit(1)


WalletOption = typer.Option(..., "--wallet", "-w", envvar="HOSTWALLET_WALLET_ID", help="Wallet id")
ApiUrlOption = typer.Option(None, "--api-url", help="Wallet service API URL")
TokenOption = typer.Option(None, "--access-token", help="API access token")
LogLevelOption = typer.Option(None, "--log-level", "-l")


@app.command()
def info(
    wallet_id: str = WalletOption,
    api_url: str | None = ApiUrlOption,
    access_token: str | None = TokenOption,
    log_level: str | None = LogLevelOption,
) -> None:
    """Show label, type and balances of a wallet."""

    async def _info(wallet: Wallet) -> None:
        typer.echo(f"\nWallet:    {wallet.address()}")
        typer.echo(f"Label:     {wallet.label()}")
        typer.echo(f"Type:      {wallet.type()}")
        typer.echo(f"Balance:   {wallet.balance():,} sats")
        typer.echo(f"Pending:   {wallet.pending_balance():,} sats")
        typer.echo(f"Available: {wallet.available_balance():,} sats")
        typer.echo(f"Keychains: {len(wallet.keychains)}")

    _run_with_wallet(wallet_id, api_url, access_token, log_level, _info)


@app.command()
def addresses(
    wallet_id: str = WalletOption,
    limit: int | None = typer.Option(None, "--limit", help="Number of addresses to get"),
    api_url: str | None = ApiUrlOption,
    access_token: str | None = TokenOption,
    log_level: str | None = LogLevelOption,
) -> None:
    """List the addresses of a wallet."""

    async def _addresses(wallet: Wallet) -> None:
        _echo_json(await wallet.addresses(limit=limit))

    _run_with_wallet(wallet_id, api_url, access_token, log_level, _addresses)


@app.command("create-address")
def create_address(
    wallet_id: str = WalletOption,
    chain: int = typer.Option(0, "--chain", help="0 for receive, 1 for change"),
    api_url: str | None = ApiUrlOption,
    access_token: str | None = TokenOption,
    log_level: str | None = LogLevelOption,
) -> None:
    """Create a new address on a wallet."""

    async def _create(wallet: Wallet) -> None:
        _echo_json(await wallet.create_address(chain=chain))

    _run_with_wallet(wallet_id, api_url, access_token, log_level, _create)


@app.command()
def unspents(
    wallet_id: str = WalletOption,
    btc_limit: float | None = typer.Option(None, "--btc-limit", help="Value limit in BTC"),
    api_url: str | None = ApiUrlOption,
    access_token: str | None = TokenOption,
    log_level: str | None = LogLevelOption,
) -> None:
    """List the unspents of a wallet."""

    async def _unspents(wallet: Wallet) -> None:
        _echo_json(await wallet.unspents(btc_limit=btc_limit))

    _run_with_wallet(wallet_id, api_url, access_token, log_level, _unspents)


@app.command()
def transactions(
    wallet_id: str = WalletOption,
    api_url: str | None = ApiUrlOption,
    access_token: str | None = TokenOption,
    log_level: str | None = LogLevelOption,
) -> None:
    """List the transactions of a wallet."""

    async def _transactions(wallet: Wallet) -> None:
        _echo_json(await wallet.transactions())

    _run_with_wallet(wallet_id, api_url, access_token, log_level, _transactions)


@app.command()
def keychain(
    wallet_id: str = WalletOption,
    api_url: str | None = ApiUrlOption,
    access_token: str | None = TokenOption,
    log_level: str | None = LogLevelOption,
) -> None:
    """Show the keychain used to sign for a wallet."""

    async def _keychain(wallet: Wallet) -> None:
        user_keychain = await wallet.get_encrypted_user_keychain()
        typer.echo(user_keychain.xpub)

    _run_with_wallet(wallet_id, api_url, access_token, log_level, _keychain)


@app.command()
def broadcast(
    tx: str = typer.Argument(..., help="Hex encoded, signed transaction"),
    wallet_id: str = WalletOption,
    api_url: str | None = ApiUrlOption,
    access_token: str | None = TokenOption,
    log_level: str | None = LogLevelOption,
) -> None:
    """Send a signed transaction via the wallet service."""

    async def _broadcast(wallet: Wallet) -> None:
        receipt = await wallet.send_transaction(tx)
        _echo_json({"tx": receipt.tx, "hash": receipt.hash})

    _run_with_wallet(wallet_id, api_url, access_token, log_level, _broadcast)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
