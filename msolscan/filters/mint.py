"""Pool filter on a target mint."""

from collections.abc import Iterable

import structlog

from ..core.types import CandidatePool, PoolListing

logger = structlog.get_logger(__name__)


def filter_by_mint(
    listings: Iterable[PoolListing], target_mint: str
) -> list[CandidatePool]:
    """Keep the pools that pair ``target_mint``, tagging the matching side.

    Order is preserved. A pool with the target on both sides is tagged as
    side A.
    """
    candidates = []
    for listing in listings:
        a_is_target = listing.mint_a == target_mint
        b_is_target = listing.mint_b == target_mint
        if not a_is_target and not b_is_target:
            continue
        if a_is_target and b_is_target:
            logger.warning(
                "Pool pairs the target mint with itself, using side A",
                pool=listing.address,
            )
        candidates.append(CandidatePool(listing=listing, target_is_side_a=a_is_target))

    logger.info("Filtered pools", target_mint=target_mint, matched=len(candidates))
    return candidates
