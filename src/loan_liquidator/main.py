"""
Command-line entry point for the liquidation bot.
"""

import asyncio
import logging
import signal
import sys

import click
from prometheus_client import start_http_server

from .adapters import LendingPlatformAdapter, LendingTokenAdapter
from .config import Settings, load_settings
from .connection import ChainConnection
from .funding import fund_liquidator
from .logging_config import setup_structured_logging
from .monitor import FailureTracker, LiquidationMonitor
from .scheduler import PollingScheduler
from .types import ConfigurationError, ConnectivityError

logger = logging.getLogger(__name__)


async def run_bot(settings: Settings) -> None:
    """Connect, optionally fund the bot, and scan until signalled to stop"""
    connection = ChainConnection(
        settings.rpc_url,
        private_key=settings.private_key,
        signer_index=settings.signer_index,
        connection_timeout=settings.call_timeout,
    )
    await connection.connect()
    try:
        ledger_address = await connection.ensure_contract(settings.ledger_address)
        token_address = await connection.ensure_contract(settings.token_address)

        ledger = LendingPlatformAdapter(connection, ledger_address,
                                        call_timeout=settings.call_timeout,
                                        receipt_timeout=settings.receipt_timeout)

        if settings.fund_on_startup:
            token = LendingTokenAdapter(connection, token_address,
                                        call_timeout=settings.call_timeout,
                                        receipt_timeout=settings.receipt_timeout)
            await fund_liquidator(token, connection.address, ledger_address, settings.approval_amount)

        if settings.metrics_port:
            start_http_server(settings.metrics_port)
            logger.info(f"Serving metrics on port {settings.metrics_port}")

        monitor = LiquidationMonitor(ledger, FailureTracker(settings.repeated_failure_threshold))
        scheduler = PollingScheduler(monitor.scan_once, interval=settings.poll_interval)

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, scheduler.request_stop)
            except NotImplementedError:
                # add_signal_handler is unavailable on Windows event loops
                pass

        logger.info(f"Watching lending platform {ledger_address}")
        await scheduler.run_forever()
    finally:
        await connection.disconnect()


@click.group()
def cli():
    """Liquidation bot for the peer-to-peer lending platform."""
    pass


@cli.command()
@click.option("--rpc-url", default=None, help="JSON-RPC endpoint of the node.")
@click.option("--ledger-address", default=None, help="Lending platform contract address.")
@click.option("--token-address", default=None, help="Borrowed-asset token contract address.")
@click.option("--poll-interval", type=float, default=None, help="Seconds between scans (default 3).")
@click.option("--signer-index", type=int, default=None, help="Node account used when no private key is set.")
@click.option("--metrics-port", type=int, default=None, help="Expose Prometheus metrics on this port.")
@click.option("--log-level", default=None, help="Logging level (default INFO).")
@click.option("--skip-funding", is_flag=True, default=False, help="Do not mint and approve tokens at startup.")
def run(rpc_url, ledger_address, token_address, poll_interval, signer_index,
        metrics_port, log_level, skip_funding):
    """Watch all loans and liquidate under-collateralized ones."""
    # the configured level is applied once settings are validated
    setup_structured_logging("INFO")
    logger.info("Liquidation bot starting")

    try:
        settings = load_settings(
            rpc_url=rpc_url,
            ledger_address=ledger_address,
            token_address=token_address,
            poll_interval=poll_interval,
            signer_index=signer_index,
            metrics_port=metrics_port,
            log_level=log_level,
            fund_on_startup=False if skip_funding else None,
        )
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)

    setup_structured_logging(settings.log_level)

    try:
        asyncio.run(run_bot(settings))
    except (ConfigurationError, ConnectivityError) as e:
        logger.error(f"Startup failed: {e}")
        sys.exit(1)

    logger.info("Liquidation bot stopped")


if __name__ == '__main__':
    cli()
