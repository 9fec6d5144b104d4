from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Dict

from app.config import get_settings


class UnsupportedChainError(ValueError):
    pass


@dataclass(frozen=True)
class ChainInfo:
    chain_id: int
    name: str
    native_symbol: str
    default_rpc_url: str
    keywords: tuple[str, ...] = ()
    is_testnet: bool = False
    is_layer2: bool = False


# Order matters: chain detection in free text walks this tuple and stops at
# the first keyword hit.
SUPPORTED_CHAINS: tuple[ChainInfo, ...] = (
    ChainInfo(
        chain_id=4202,
        name="Lisk Sepolia",
        native_symbol="LSK",
        default_rpc_url="https://rpc.sepolia-api.lisk.com",
        keywords=("lisk", "lisk sepolia", "sepolia"),
        is_testnet=True,
    ),
    ChainInfo(
        chain_id=1,
        name="Ethereum Mainnet",
        native_symbol="ETH",
        default_rpc_url="https://eth.llamarpc.com",
        keywords=("ethereum", "mainnet", "eth"),
    ),
    ChainInfo(
        chain_id=137,
        name="Polygon",
        native_symbol="ETH",
        default_rpc_url="https://polygon-rpc.com",
        keywords=("polygon", "matic"),
        is_layer2=True,
    ),
    ChainInfo(
        chain_id=10,
        name="Optimism",
        native_symbol="ETH",
        default_rpc_url="https://mainnet.optimism.io",
        keywords=("optimism", "op"),
        is_layer2=True,
    ),
    ChainInfo(
        chain_id=42161,
        name="Arbitrum",
        native_symbol="ETH",
        default_rpc_url="https://arb1.arbitrum.io/rpc",
        keywords=("arbitrum",),
        is_layer2=True,
    ),
    ChainInfo(
        chain_id=8453,
        name="Base",
        native_symbol="ETH",
        default_rpc_url="https://mainnet.base.org",
        keywords=("base",),
        is_layer2=True,
    ),
)

_CHAINS_BY_ID: Dict[int, ChainInfo] = {c.chain_id: c for c in SUPPORTED_CHAINS}

NATIVE_SYMBOLS = frozenset(c.native_symbol for c in SUPPORTED_CHAINS)


def _load_rpc_urls() -> Dict[int, str]:
    """
    Load RPC URL overrides from settings.

    Expected env format:
      RPC_URLS='{"1":"https://eth.llamarpc.com","4202":"https://rpc.sepolia-api.lisk.com"}'
    """
    settings = get_settings()

    raw = settings.RPC_URLS
    if not raw:
        return {}

    try:
        data = json.loads(raw)
    except Exception as e:
        raise ValueError("RPC_URLS must be valid JSON") from e

    rpc_urls: Dict[int, str] = {}
    for k, v in data.items():
        try:
            chain_id = int(k)
        except ValueError:
            raise ValueError(f"Invalid chain_id key in RPC_URLS: {k}")

        if not isinstance(v, str) or not v:
            raise ValueError(f"Invalid RPC URL for chain {chain_id}")

        rpc_urls[chain_id] = v.rstrip("/")

    return rpc_urls


def is_supported_chain(chain_id: int | None) -> bool:
    return chain_id in _CHAINS_BY_ID


def get_chain(chain_id: int) -> ChainInfo:
    """
    Return registry metadata for chain_id.
    Raises UnsupportedChainError if the chain is not configured.
    """
    chain = _CHAINS_BY_ID.get(chain_id)
    if chain is None:
        raise UnsupportedChainError(f"Unsupported chain_id: {chain_id}")
    return chain


def chain_name(chain_id: int) -> str:
    chain = _CHAINS_BY_ID.get(chain_id)
    return chain.name if chain else f"Chain {chain_id}"


def get_rpc_url(chain_id: int) -> str:
    chain = get_chain(chain_id)
    return _load_rpc_urls().get(chain_id) or chain.default_rpc_url


def list_supported_chains() -> list[int]:
    return sorted(_CHAINS_BY_ID.keys())
