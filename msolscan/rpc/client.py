"""Batched Solana JSON-RPC account reader."""

import base64
import binascii
import time
from typing import Any

import httpx
import structlog

from ..core.errors import NetworkError, ParseError, SolanaRpcError
from ..core.interfaces import AccountReader
from ..core.retry import build_retrying
from ..core.types import AccountInfo

logger = structlog.get_logger(__name__)

# getMultipleAccounts rejects more than 100 keys per call
MAX_ACCOUNTS_PER_REQUEST = 100


def parse_account_entry(entry: dict[str, Any] | None) -> AccountInfo | None:
    """Map one base64-encoded getMultipleAccounts entry to AccountInfo.

    Args:
        entry: Raw entry from ``result.value`` (None for a missing account)

    Returns:
        AccountInfo, or None when the account does not exist

    Raises:
        ParseError: If the entry does not have the expected shape
    """
    if entry is None:
        return None

    try:
        payload, encoding = entry["data"]
        owner = entry["owner"]
    except (KeyError, TypeError, ValueError) as e:
        raise ParseError(f"Malformed account entry: {entry!r}") from e

    if encoding != "base64":
        raise ParseError(f"Unexpected account data encoding: {encoding}")

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, TypeError) as e:
        raise ParseError("Account data is not valid base64") from e

    return AccountInfo(owner=owner, data=data)


class SolanaRpcClient(AccountReader):
    """JSON-RPC reader for Solana account data."""

    def __init__(
        self,
        rpc_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        batch_size: int = MAX_ACCOUNTS_PER_REQUEST,
        max_attempts: int = 1,
    ) -> None:
        """Initialize SolanaRpcClient.

        Args:
            rpc_url: Solana RPC endpoint URL
            client: Optional httpx client (will create one if not provided)
            timeout: Request timeout in seconds
            batch_size: Addresses per getMultipleAccounts call
            max_attempts: Attempts per call on transport errors
        """
        if not 1 <= batch_size <= MAX_ACCOUNTS_PER_REQUEST:
            raise ValueError(
                f"batch_size must be between 1 and {MAX_ACCOUNTS_PER_REQUEST}"
            )

        self.rpc_url = rpc_url
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)
        self.timeout = timeout
        self.batch_size = batch_size
        self.retry_config = build_retrying(max_attempts)
        self._request_id = 0
        logger.debug("SolanaRpcClient initialized", rpc_url=rpc_url, timeout=timeout)

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the httpx client if this reader created it."""
        if self._owns_client:
            await self.client.aclose()

    def _get_request_id(self) -> int:
        """Get next request ID."""
        self._request_id += 1
        return self._request_id

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        async for attempt in self.retry_config:
            with attempt:
                response = await self.client.post(
                    self.rpc_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                    timeout=self.timeout,
                )
                response.raise_for_status()
                return response

    async def _make_rpc_request(self, method: str, params: list[Any]) -> Any:
        """Make a JSON-RPC request.

        Args:
            method: RPC method name
            params: Method parameters

        Returns:
            RPC response result

        Raises:
            SolanaRpcError: For JSON-RPC error objects
            NetworkError: For transport failures and non-2xx statuses
            ParseError: For bodies that are not JSON-RPC responses
        """
        request_id = self._get_request_id()
        payload = {
            "jsonrpc": "2.0",
            "id": request_id,
            "method": method,
            "params": params,
        }

        start_time = time.time()
        logger.debug("Making RPC request", method=method, request_id=request_id)

        try:
            response = await self._post(payload)
        except httpx.HTTPStatusError as e:
            logger.error(
                "RPC request failed",
                method=method,
                status_code=e.response.status_code,
            )
            raise NetworkError(
                f"RPC {method} returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error(
                "RPC request failed",
                method=method,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise NetworkError(f"RPC {method} failed: {e}") from e

        logger.debug(
            "RPC request completed",
            method=method,
            request_id=request_id,
            duration=time.time() - start_time,
        )

        try:
            data = response.json()
        except ValueError as e:
            raise ParseError(f"RPC {method} returned a non-JSON body") from e

        if not isinstance(data, dict):
            raise ParseError(f"RPC {method} returned an unexpected body")

        if "error" in data:
            error = data["error"] or {}
            if not isinstance(error, dict):
                raise ParseError(f"RPC {method} returned a malformed error: {error!r}")
            raise SolanaRpcError(
                code=error.get("code", -1),
                message=error.get("message", "Unknown RPC error"),
                data=error.get("data"),
            )

        if "result" not in data:
            raise ParseError(f"RPC {method} response has no result")

        return data["result"]

    async def get_multiple_accounts(
        self, addresses: list[str]
    ) -> list[AccountInfo | None]:
        """Fetch account data for every address, preserving order.

        Args:
            addresses: Account addresses (base58)

        Returns:
            One entry per address; None where the account does not exist

        Raises:
            NetworkError: If any batch fails
            ParseError: If any batch response is malformed
        """
        accounts: list[AccountInfo | None] = []

        for i in range(0, len(addresses), self.batch_size):
            chunk = addresses[i : i + self.batch_size]
            result = await self._make_rpc_request(
                "getMultipleAccounts",
                [chunk, {"encoding": "base64", "commitment": "confirmed"}],
            )

            try:
                value = result["value"]
            except (KeyError, TypeError) as e:
                raise ParseError(
                    "Unexpected getMultipleAccounts response shape"
                ) from e

            if not isinstance(value, list) or len(value) != len(chunk):
                raise ParseError(
                    f"getMultipleAccounts returned {len(value) if isinstance(value, list) else 'no'} "
                    f"entries for {len(chunk)} addresses"
                )

            accounts.extend(parse_account_entry(entry) for entry in value)

        logger.debug("Fetched accounts", count=len(accounts))
        return accounts
