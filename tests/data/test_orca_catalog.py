"""Tests for the Orca whirlpool catalog source."""

import httpx
import pytest
import respx

from conftest import CATALOG_URL, SOL_MINT, USDC_MINT, catalog_entry
from msolscan.core.errors import NetworkError, ParseError
from msolscan.data.orca import OrcaWhirlpoolList, map_whirlpool_entry_to_listing

MSOL = "mSoLzYCxHdYgdzU16g5QSh3i5K3z3KZK7ytfqcJm7So"


class TestMapping:
    """Test catalog entry mapping."""

    def test_map_entry(self):
        """Test mapping a complete entry."""
        listing = map_whirlpool_entry_to_listing(
            catalog_entry(
                "HJPjoWUrhoZzkNfRpHuieeFk9WcZWjwy6PBjZ81ngndJ",
                SOL_MINT, "SOL", MSOL, "mSOL", 1,
            )
        )

        assert listing.address == "HJPjoWUrhoZzkNfRpHuieeFk9WcZWjwy6PBjZ81ngndJ"
        assert listing.name == "SOL/mSOL(1)"
        assert listing.mint_a == SOL_MINT
        assert listing.mint_b == MSOL
        assert listing.symbol_a == "SOL"
        assert listing.symbol_b == "mSOL"
        assert listing.tick_spacing == 1

    @pytest.mark.parametrize(
        "missing", ["address", "tokenA", "tokenB", "tickSpacing"]
    )
    def test_map_entry_missing_field(self, missing):
        """Test that a missing top-level field is a ParseError."""
        entry = catalog_entry("pool", MSOL, "mSOL", USDC_MINT, "USDC", 64)
        del entry[missing]

        with pytest.raises(ParseError):
            map_whirlpool_entry_to_listing(entry)

    def test_map_entry_missing_mint(self):
        """Test that a token without a mint is a ParseError."""
        entry = catalog_entry("pool", MSOL, "mSOL", USDC_MINT, "USDC", 64)
        del entry["tokenB"]["mint"]

        with pytest.raises(ParseError):
            map_whirlpool_entry_to_listing(entry)


class TestOrcaWhirlpoolList:
    """Test fetching the catalog."""

    @pytest.fixture
    def source(self):
        return OrcaWhirlpoolList(CATALOG_URL)

    def test_init(self, source):
        """Test initialization."""
        assert source.url == CATALOG_URL
        assert source.timeout == 30.0
        assert isinstance(source.session, httpx.AsyncClient)

    @pytest.mark.asyncio
    async def test_context_manager_closes_own_session(self):
        """Test a session created by the source is closed on exit."""
        async with OrcaWhirlpoolList(CATALOG_URL) as source:
            assert not source.session.is_closed
        assert source.session.is_closed

    @pytest.mark.asyncio
    async def test_context_manager_keeps_shared_session(self):
        """Test an injected session is left open for its owner."""
        async with httpx.AsyncClient() as session:
            async with OrcaWhirlpoolList(CATALOG_URL, session=session):
                pass
            assert not session.is_closed

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_success(self, source):
        """Test fetching preserves catalog order."""
        respx.get(CATALOG_URL).mock(
            return_value=httpx.Response(
                200,
                json={
                    "whirlpools": [
                        catalog_entry("pool1", SOL_MINT, "SOL", MSOL, "mSOL", 1),
                        catalog_entry("pool2", MSOL, "mSOL", USDC_MINT, "USDC", 64),
                    ]
                },
            )
        )

        listings = await source.fetch()

        assert [listing.address for listing in listings] == ["pool1", "pool2"]
        assert [listing.name for listing in listings] == ["SOL/mSOL(1)", "mSOL/USDC(64)"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_http_500(self, source):
        """Test that a server error is a NetworkError."""
        respx.get(CATALOG_URL).mock(
            return_value=httpx.Response(500, text="Internal Server Error")
        )

        with pytest.raises(NetworkError) as exc_info:
            await source.fetch()

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_unreachable(self, source):
        """Test that a connection failure is a NetworkError."""
        respx.get(CATALOG_URL).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(NetworkError):
            await source.fetch()

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_not_json(self, source):
        """Test that a non-JSON body is a ParseError."""
        respx.get(CATALOG_URL).mock(return_value=httpx.Response(200, text="<html>"))

        with pytest.raises(ParseError):
            await source.fetch()

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_missing_whirlpools(self, source):
        """Test that a body without the whirlpools array is a ParseError."""
        respx.get(CATALOG_URL).mock(
            return_value=httpx.Response(200, json={"pools": []})
        )

        with pytest.raises(ParseError):
            await source.fetch()

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_no_retry_by_default(self, source):
        """Test that a transport failure is not retried with the default policy."""
        route = respx.get(CATALOG_URL).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(NetworkError):
            await source.fetch()

        assert route.call_count == 1
