"""Vault balance aggregation and console report."""

import sys
from collections.abc import Iterable
from datetime import UTC, datetime
from decimal import Decimal, localcontext
from typing import TextIO

import structlog

from ..core.errors import DeserializationError
from ..core.interfaces import AccountReader
from ..core.types import CandidatePool, PoolAmount, ScanReport, VaultBalance
from ..onchain.layouts import decode_token_account

logger = structlog.get_logger(__name__)

NAME_WIDTH = 18
AMOUNT_WIDTH = 16

# Enough digits for any sum of u64 amounts
_PRECISION = 60


def from_u64(raw_amount: int, decimals: int) -> Decimal:
    """Convert a raw on-chain integer amount to its decimal value, exactly."""
    if raw_amount < 0:
        raise ValueError(f"Raw amount must be non-negative, got {raw_amount}")
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(raw_amount).scaleb(-decimals)


def format_amount(amount: Decimal) -> str:
    """Plain notation with trailing zeros trimmed (``5.000000000`` -> ``5``)."""
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return format(amount.normalize(), "f")


def format_timestamp(ts: datetime) -> str:
    """ISO-8601 UTC with milliseconds and a ``Z`` suffix."""
    return ts.astimezone(UTC).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


async def fetch_vault_balances(
    rpc: AccountReader, vaults: list[str], target_mint: str | None = None
) -> list[VaultBalance]:
    """Read every vault token account in one batch, preserving order.

    Raises:
        NetworkError: If the batch read fails
        DeserializationError: If a vault is not a token account, or holds a
            mint other than ``target_mint`` when one is given
    """
    accounts = await rpc.get_multiple_accounts(vaults)
    balances = [
        decode_token_account(account, vault)
        for vault, account in zip(vaults, accounts, strict=True)
    ]

    if target_mint is not None:
        for balance in balances:
            if balance.mint != target_mint:
                raise DeserializationError(
                    f"Vault {balance.vault} holds {balance.mint}, expected {target_mint}"
                )

    logger.info("Fetched vault balances", vaults=len(balances))
    return balances


def build_report(
    candidates: list[CandidatePool],
    balances: list[VaultBalance],
    decimals: int,
    generated_at: datetime | None = None,
) -> ScanReport:
    """Pair candidates with their balances and sum the converted amounts.

    Raises:
        ValueError: If a candidate has no vault, the lists differ in length,
            or a balance belongs to a different vault than its candidate
    """
    if len(candidates) != len(balances):
        raise ValueError(
            f"Got {len(balances)} balances for {len(candidates)} pools"
        )

    pools = []
    total = Decimal(0)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        for candidate, balance in zip(candidates, balances):
            if candidate.vault is None:
                raise ValueError(
                    f"Vault not resolved for pool {candidate.listing.address}"
                )
            if candidate.vault != balance.vault:
                raise ValueError(
                    f"Balance for {balance.vault} paired with vault {candidate.vault}"
                )

            amount = from_u64(balance.raw_amount, decimals)
            total += amount
            pools.append(
                PoolAmount(pool=candidate.listing, vault=candidate.vault, amount=amount)
            )

    return ScanReport(
        pools=pools,
        total=total,
        generated_at=generated_at or datetime.now(UTC),
    )


def format_pool_line(pool: PoolAmount, symbol: str) -> str:
    """One report line: padded name, right-aligned amount, vault address."""
    amount = format_amount(pool.amount)
    return (
        f"{pool.pool.name:<{NAME_WIDTH}} has {amount:>{AMOUNT_WIDTH}} "
        f"{symbol} vault: {pool.vault}"
    )


def format_total_line(report: ScanReport, symbol: str, source: str) -> str:
    return (
        f">> {source} has total {format_amount(report.total)} {symbol} ! "
        f"@{format_timestamp(report.generated_at)}"
    )


def render_report(report: ScanReport, symbol: str, source: str) -> list[str]:
    """Render the report as console lines, in discovery order."""
    lines = [format_pool_line(pool, symbol) for pool in report.pools]
    lines.append("")
    lines.append(format_total_line(report, symbol, source))
    return lines


def emit_report(lines: Iterable[str], stream: TextIO | None = None) -> None:
    out = stream or sys.stdout
    for line in lines:
        out.write(line + "\n")
    out.flush()
