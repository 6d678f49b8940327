"""Core interfaces for the vault scan."""

from typing import Protocol, runtime_checkable

from .types import AccountInfo, PoolListing


@runtime_checkable
class PoolCatalog(Protocol):
    """Source of known pools."""

    async def fetch(self) -> list[PoolListing]:
        """Return every pool the catalog knows about."""
        ...


@runtime_checkable
class AccountReader(Protocol):
    """Batched on-chain account reader."""

    async def get_multiple_accounts(
        self, addresses: list[str]
    ) -> list[AccountInfo | None]:
        """Return one entry per address, in input order."""
        ...
