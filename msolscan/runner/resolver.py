"""Vault resolution from on-chain whirlpool state."""

import structlog

from ..core.errors import DeserializationError
from ..core.interfaces import AccountReader
from ..core.types import CandidatePool
from ..onchain.layouts import decode_whirlpool

logger = structlog.get_logger(__name__)


async def resolve_vaults(
    rpc: AccountReader,
    candidates: list[CandidatePool],
    target_mint: str,
    program_id: str,
) -> list[CandidatePool]:
    """Set ``vault`` on every candidate from one batched whirlpool read.

    Args:
        rpc: Account reader
        candidates: Filtered pools, in discovery order
        target_mint: Mint the flagged side must hold
        program_id: Whirlpool program that must own each pool account

    Returns:
        The same candidates, in the same order, with ``vault`` set

    Raises:
        NetworkError: If the batch read fails
        DeserializationError: If any pool cannot be decoded or its flagged
            side does not hold ``target_mint``
    """
    addresses = [c.listing.address for c in candidates]
    accounts = await rpc.get_multiple_accounts(addresses)

    for candidate, account in zip(candidates, accounts, strict=True):
        state = decode_whirlpool(account, candidate.listing.address, program_id)

        if candidate.target_is_side_a:
            mint, vault = state.token_mint_a, state.token_vault_a
        else:
            mint, vault = state.token_mint_b, state.token_vault_b

        if mint != target_mint:
            raise DeserializationError(
                f"Whirlpool {candidate.listing.address} holds {mint} on the "
                f"{'A' if candidate.target_is_side_a else 'B'} side, "
                f"expected {target_mint}"
            )

        if (
            candidate.listing.tick_spacing is not None
            and candidate.listing.tick_spacing != state.tick_spacing
        ):
            logger.warning(
                "Catalog tick spacing differs from chain",
                pool=candidate.listing.address,
                catalog=candidate.listing.tick_spacing,
                chain=state.tick_spacing,
            )

        candidate.vault = vault

    logger.info("Resolved vaults", pools=len(candidates))
    return candidates
