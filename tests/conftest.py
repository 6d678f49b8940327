"""Shared fixtures: deterministic addresses and encoded account payloads."""

import base64
import json
import struct

import base58
import httpx
import pytest
import structlog

from msolscan.config.settings import MSOL_MINT, WHIRLPOOL_PROGRAM_ID
from msolscan.onchain.layouts import (
    TOKEN_PROGRAM_ID,
    WHIRLPOOL_ACCOUNT_SIZE,
    WHIRLPOOL_DISCRIMINATOR,
)

RPC_URL = "https://rpc.test"
CATALOG_URL = "https://catalog.test/v1/whirlpool/list"
SOL_MINT = "So11111111111111111111111111111111111111112"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


def make_address(seed: int) -> str:
    """32-byte address made of one repeated byte."""
    return base58.b58encode(bytes([seed]) * 32).decode("ascii")


def whirlpool_data(
    mint_a: str,
    vault_a: str,
    mint_b: str,
    vault_b: str,
    tick_spacing: int = 64,
) -> bytes:
    data = bytearray(WHIRLPOOL_ACCOUNT_SIZE)
    data[0:8] = WHIRLPOOL_DISCRIMINATOR
    struct.pack_into("<H", data, 41, tick_spacing)
    data[101:133] = base58.b58decode(mint_a)
    data[133:165] = base58.b58decode(vault_a)
    data[181:213] = base58.b58decode(mint_b)
    data[213:245] = base58.b58decode(vault_b)
    return bytes(data)


def token_account_data(mint: str, amount: int, owner: str | None = None) -> bytes:
    data = bytearray(165)
    data[0:32] = base58.b58decode(mint)
    data[32:64] = base58.b58decode(owner or make_address(201))
    struct.pack_into("<Q", data, 64, amount)
    return bytes(data)


def account_entry(data: bytes, owner: str) -> dict:
    """Account as getMultipleAccounts returns it with base64 encoding."""
    return {
        "data": [base64.b64encode(data).decode("ascii"), "base64"],
        "executable": False,
        "lamports": 2039280,
        "owner": owner,
        "rentEpoch": 0,
    }


def catalog_entry(address: str, mint_a: str, sym_a: str, mint_b: str, sym_b: str, tick_spacing: int) -> dict:
    return {
        "address": address,
        "tokenA": {"mint": mint_a, "symbol": sym_a, "decimals": 9},
        "tokenB": {"mint": mint_b, "symbol": sym_b, "decimals": 6},
        "tickSpacing": tick_spacing,
        "price": 1.0,
    }


class FakeChain:
    """Address -> account entry map served as a JSON-RPC endpoint."""

    def __init__(self) -> None:
        self.accounts: dict[str, dict] = {}
        self.requests: list[dict] = []

    def add_whirlpool(self, address: str, **kwargs) -> None:
        self.accounts[address] = account_entry(
            whirlpool_data(**kwargs), WHIRLPOOL_PROGRAM_ID
        )

    def add_token_account(self, address: str, mint: str, amount: int) -> None:
        self.accounts[address] = account_entry(
            token_account_data(mint, amount), TOKEN_PROGRAM_ID
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.requests.append(payload)
        addresses = payload["params"][0]
        return httpx.Response(
            200,
            json={
                "jsonrpc": "2.0",
                "id": payload["id"],
                "result": {
                    "context": {"slot": 1},
                    "value": [self.accounts.get(a) for a in addresses],
                },
            },
        )


@pytest.fixture(autouse=True)
def reset_structlog():
    """Drop logging configuration bound to a test's captured streams."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def fake_chain() -> FakeChain:
    return FakeChain()


@pytest.fixture
def msol_mint() -> str:
    return MSOL_MINT
