"""Orca whirlpool catalog source."""

from typing import Any

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from ..core.errors import NetworkError, ParseError
from ..core.interfaces import PoolCatalog
from ..core.retry import build_retrying
from ..core.types import PoolListing

logger = structlog.get_logger(__name__)


class _CatalogToken(BaseModel):
    symbol: str
    mint: str


class _CatalogEntry(BaseModel):
    address: str
    tokenA: _CatalogToken
    tokenB: _CatalogToken
    tickSpacing: int


def map_whirlpool_entry_to_listing(data: dict[str, Any]) -> PoolListing:
    """Map one catalog entry to a PoolListing.

    Args:
        data: Raw entry from the ``whirlpools`` array

    Returns:
        PoolListing named ``"{symbolA}/{symbolB}({tickSpacing})"``

    Raises:
        ParseError: If a required field is missing or has the wrong type
    """
    try:
        entry = _CatalogEntry.model_validate(data)
    except ValidationError as e:
        raise ParseError(f"Malformed whirlpool entry: {e}") from e

    return PoolListing(
        address=entry.address,
        name=f"{entry.tokenA.symbol}/{entry.tokenB.symbol}({entry.tickSpacing})",
        mint_a=entry.tokenA.mint,
        mint_b=entry.tokenB.mint,
        symbol_a=entry.tokenA.symbol,
        symbol_b=entry.tokenB.symbol,
        tick_spacing=entry.tickSpacing,
    )


class OrcaWhirlpoolList(PoolCatalog):
    """Orca REST catalog of whirlpools."""

    def __init__(
        self,
        url: str,
        session: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        max_attempts: int = 1,
    ) -> None:
        """Initialize the catalog source.

        Args:
            url: Whirlpool list endpoint
            session: Optional httpx client session
            timeout: Request timeout in seconds
            max_attempts: Attempts on transport errors
        """
        self.url = url
        self._owns_session = session is None
        self.session = session or httpx.AsyncClient(timeout=timeout)
        self.timeout = timeout
        self.retry_config = build_retrying(max_attempts)

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the httpx session if this source created it."""
        if self._owns_session:
            await self.session.aclose()

    async def _get(self) -> httpx.Response:
        async for attempt in self.retry_config:
            with attempt:
                response = await self.session.get(self.url, timeout=self.timeout)
                response.raise_for_status()
                return response

    async def fetch(self) -> list[PoolListing]:
        """Fetch and map the whole catalog.

        Raises:
            NetworkError: If the endpoint is unreachable or returns non-2xx
            ParseError: If the body is not the expected JSON shape
        """
        try:
            response = await self._get()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Whirlpool list request failed",
                url=self.url,
                status_code=e.response.status_code,
            )
            raise NetworkError(
                f"Whirlpool list returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error("Whirlpool list unreachable", url=self.url, error=str(e))
            raise NetworkError(f"Whirlpool list unreachable: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise ParseError("Whirlpool list returned a non-JSON body") from e

        if not isinstance(body, dict) or not isinstance(body.get("whirlpools"), list):
            raise ParseError("Whirlpool list response has no 'whirlpools' array")

        listings = [map_whirlpool_entry_to_listing(p) for p in body["whirlpools"]]

        logger.info("Fetched whirlpool list", pools=len(listings))
        return listings
