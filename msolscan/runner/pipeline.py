"""Vault scan pipeline runner."""

import argparse
import asyncio
import logging
import sys

import httpx
import structlog

from ..config.settings import AppSettings, load_settings
from ..core.interfaces import AccountReader, PoolCatalog
from ..core.types import ScanReport
from ..data.orca import OrcaWhirlpoolList
from ..filters.mint import filter_by_mint
from ..rpc.client import SolanaRpcClient
from .report import build_report, emit_report, fetch_vault_balances, render_report
from .resolver import resolve_vaults

logger = structlog.get_logger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Send structured logs to stderr so stdout only carries the report."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


class VaultScanPipeline:
    """Catalog -> filter -> vault resolution -> balance aggregation."""

    def __init__(
        self,
        settings: AppSettings,
        catalog: PoolCatalog,
        rpc: AccountReader,
    ) -> None:
        self.settings = settings
        self.catalog = catalog
        self.rpc = rpc

    async def run(self) -> ScanReport:
        """Run every stage once and return the aggregated report.

        Any stage failure propagates; no partial report is produced.
        """
        settings = self.settings
        logger.info("Starting vault scan", target_mint=settings.target_mint)

        listings = await self.catalog.fetch()
        candidates = filter_by_mint(listings, settings.target_mint)
        candidates = await resolve_vaults(
            self.rpc,
            candidates,
            target_mint=settings.target_mint,
            program_id=settings.whirlpool_program_id,
        )
        balances = await fetch_vault_balances(
            self.rpc,
            [c.vault for c in candidates],
            target_mint=settings.target_mint,
        )
        report = build_report(candidates, balances, settings.target_decimals)

        logger.info(
            "Vault scan complete",
            pools=len(report.pools),
            total=str(report.total),
        )
        return report

    def render(self, report: ScanReport) -> list[str]:
        return render_report(
            report, self.settings.target_symbol, self.settings.source_name
        )


async def scan(settings: AppSettings) -> list[str]:
    """Build the clients from settings, run the scan and render the report."""
    async with httpx.AsyncClient(timeout=settings.request_timeout) as session:
        catalog = OrcaWhirlpoolList(
            settings.whirlpool_list_url,
            session=session,
            timeout=settings.request_timeout,
            max_attempts=settings.max_attempts,
        )
        rpc = SolanaRpcClient(
            settings.rpc_url,
            client=session,
            timeout=settings.request_timeout,
            batch_size=settings.rpc_batch_size,
            max_attempts=settings.max_attempts,
        )
        pipeline = VaultScanPipeline(settings, catalog, rpc)
        report = await pipeline.run()
        return pipeline.render(report)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Sum the target token held in Orca whirlpool vaults"
    )
    parser.add_argument("--config", default=None, help="YAML configuration file")
    parser.add_argument("--rpc-url", default=None, help="Solana RPC URL")
    parser.add_argument("--mint", default=None, help="Target token mint")
    parser.add_argument("--symbol", default=None, help="Target token symbol")
    parser.add_argument(
        "--decimals", type=int, default=None, help="Target token decimals"
    )
    return parser


async def main(argv: list[str] | None = None) -> int:
    """Main entry point; returns the process exit status."""
    args = build_parser().parse_args(argv)
    configure_logging()

    try:
        settings = load_settings(
            args.config,
            rpc_url=args.rpc_url,
            target_mint=args.mint,
            target_symbol=args.symbol,
            target_decimals=args.decimals,
        )
        configure_logging(settings.log_level)
        lines = await scan(settings)
    except Exception as e:
        logger.error("Fatal error", error=str(e), error_type=type(e).__name__)
        return 1

    emit_report(lines)
    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
