"""Core data types for the vault scan."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class PoolListing(BaseModel):
    """Whirlpool entry as published by the pool catalog."""

    model_config = {"frozen": True}

    address: str = Field(description="Whirlpool account address")
    name: str = Field(description="Display name, e.g. SOL/mSOL(1)")
    mint_a: str = Field(description="Token A mint address")
    mint_b: str = Field(description="Token B mint address")
    symbol_a: str = Field(default="", description="Token A symbol")
    symbol_b: str = Field(default="", description="Token B symbol")
    tick_spacing: int | None = Field(default=None, description="Tick spacing")


class CandidatePool(BaseModel):
    """Listing that pairs the target mint, with the vault once resolved."""

    listing: PoolListing = Field(description="Catalog entry")
    target_is_side_a: bool = Field(description="Target mint is token A")
    vault: str | None = Field(default=None, description="Vault holding the target")


class AccountInfo(BaseModel):
    """Single account returned by getMultipleAccounts."""

    owner: str = Field(description="Owning program address")
    data: bytes = Field(description="Raw account data")


class WhirlpoolState(BaseModel):
    """Subset of the whirlpool account the resolver needs."""

    tick_spacing: int
    token_mint_a: str
    token_vault_a: str
    token_mint_b: str
    token_vault_b: str


class VaultBalance(BaseModel):
    """Raw balance of a vault token account."""

    vault: str = Field(description="Token account address")
    mint: str = Field(description="Mint held by the token account")
    raw_amount: int = Field(ge=0, lt=2**64, description="Amount in base units")


class PoolAmount(BaseModel):
    """Converted target-token amount held by one pool."""

    pool: PoolListing
    vault: str
    amount: Decimal


class ScanReport(BaseModel):
    """Aggregated result of one scan."""

    pools: list[PoolAmount] = Field(default_factory=list)
    total: Decimal = Field(default=Decimal(0))
    generated_at: datetime = Field(description="Report timestamp (UTC)")
