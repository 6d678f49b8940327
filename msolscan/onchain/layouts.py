"""Decoders for the on-chain account layouts the scan reads."""

import hashlib
import struct

import base58

from ..core.errors import DeserializationError
from ..core.types import AccountInfo, VaultBalance, WhirlpoolState

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"

# Anchor account discriminator
WHIRLPOOL_DISCRIMINATOR = hashlib.sha256(b"account:Whirlpool").digest()[:8]

# Byte offsets in the Whirlpool account
TICK_SPACING_OFFSET = 41
TOKEN_MINT_A_OFFSET = 101
TOKEN_VAULT_A_OFFSET = 133
TOKEN_MINT_B_OFFSET = 181
TOKEN_VAULT_B_OFFSET = 213
WHIRLPOOL_ACCOUNT_SIZE = 653

# SPL token account: mint(32) owner(32) amount(u64)
TOKEN_ACCOUNT_MINT_OFFSET = 0
TOKEN_ACCOUNT_AMOUNT_OFFSET = 64
TOKEN_ACCOUNT_SIZE = 165


def _pubkey_at(data: bytes, offset: int) -> str:
    return base58.b58encode(data[offset : offset + 32]).decode("ascii")


def decode_whirlpool(
    account: AccountInfo | None, address: str, program_id: str
) -> WhirlpoolState:
    """Decode a whirlpool account.

    Args:
        account: Account as returned by the reader (None if missing)
        address: Whirlpool address, used in error messages
        program_id: Expected owning program

    Returns:
        Decoded whirlpool state

    Raises:
        DeserializationError: If the account is missing or not a whirlpool
    """
    if account is None:
        raise DeserializationError(f"Whirlpool account not found: {address}")

    if account.owner != program_id:
        raise DeserializationError(
            f"Account {address} is owned by {account.owner}, not {program_id}"
        )

    data = account.data
    if len(data) < WHIRLPOOL_ACCOUNT_SIZE:
        raise DeserializationError(
            f"Whirlpool account {address} is {len(data)} bytes, "
            f"expected {WHIRLPOOL_ACCOUNT_SIZE}"
        )

    if data[:8] != WHIRLPOOL_DISCRIMINATOR:
        raise DeserializationError(f"Account {address} is not a Whirlpool")

    (tick_spacing,) = struct.unpack_from("<H", data, TICK_SPACING_OFFSET)

    return WhirlpoolState(
        tick_spacing=tick_spacing,
        token_mint_a=_pubkey_at(data, TOKEN_MINT_A_OFFSET),
        token_vault_a=_pubkey_at(data, TOKEN_VAULT_A_OFFSET),
        token_mint_b=_pubkey_at(data, TOKEN_MINT_B_OFFSET),
        token_vault_b=_pubkey_at(data, TOKEN_VAULT_B_OFFSET),
    )


def decode_token_account(account: AccountInfo | None, address: str) -> VaultBalance:
    """Decode an SPL token (or Token-2022) account into its mint and raw amount.

    Raises:
        DeserializationError: If the account is missing or not a token account
    """
    if account is None:
        raise DeserializationError(f"Token account not found: {address}")

    if account.owner not in (TOKEN_PROGRAM_ID, TOKEN_2022_PROGRAM_ID):
        raise DeserializationError(
            f"Account {address} is owned by {account.owner}, not a token program"
        )

    data = account.data
    if len(data) < TOKEN_ACCOUNT_SIZE:
        raise DeserializationError(
            f"Token account {address} is {len(data)} bytes, "
            f"expected at least {TOKEN_ACCOUNT_SIZE}"
        )

    (amount,) = struct.unpack_from("<Q", data, TOKEN_ACCOUNT_AMOUNT_OFFSET)

    return VaultBalance(
        vault=address,
        mint=_pubkey_at(data, TOKEN_ACCOUNT_MINT_OFFSET),
        raw_amount=amount,
    )
