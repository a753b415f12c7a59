"""
Wallet RPC CLI - run the JSON-RPC server and generate keys.
"""

from __future__ import annotations

import asyncio
import signal
import sys

import typer
from loguru import logger
from walletcore import Contract, KeyPair

from walletrpc.config import Settings, get_settings

app = typer.Typer(
    name="walletrpc",
    help="Wallet operations over JSON-RPC",
    add_completion=False,
)


def setup_logging(level: str = "INFO") -> None:
    """Configure loguru logging."""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level.upper(),
        colorize=True,
    )


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Listen address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Listen port"),
    wallet_keys: str | None = typer.Option(
        None, "--wallet-keys", help="Comma-separated WIF keys to load"
    ),
    relay_url: str | None = typer.Option(None, "--relay-url", help="Node JSON-RPC URL"),
    log_level: str | None = typer.Option(None, "--log-level", "-l"),
) -> None:
    """Run the wallet JSON-RPC server."""
    overrides = {
        name: value
        for name, value in {
            "host": host,
            "port": port,
            "wallet_keys": wallet_keys,
            "relay_url": relay_url,
            "log_level": log_level,
        }.items()
        if value is not None
    }
    settings = get_settings().model_copy(update=overrides)
    setup_logging(settings.log_level)

    try:
        asyncio.run(run_server(settings))
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        raise typer.Exit(1) from e


async def run_server(settings: Settings) -> None:
    from walletrpc.rpc import RpcServer, WalletSession

    logger.info("Starting wallet RPC service")

    session = WalletSession.from_settings(settings)
    server = RpcServer(settings, session)

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def shutdown_handler() -> None:
        logger.info("Received shutdown signal")
        stop_event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, shutdown_handler)

    try:
        await server.start()
        await stop_event.wait()
    finally:
        await server.stop()


@app.command()
def newkey() -> None:
    """Generate a new key and print its WIF and address."""
    key = KeyPair.generate()
    contract = Contract.create_signature_contract(key.public_key)

    typer.echo(f"Address: {contract.address}")
    typer.echo(f"WIF:     {key.export()}")
    typer.echo("KEEP THE WIF SECURE - IT CONTROLS YOUR FUNDS!")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
