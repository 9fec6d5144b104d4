"""Balance and gas collaborators consumed by the transaction preview builder."""
from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Protocol

from pydantic import BaseModel, ConfigDict
from web3 import Web3

from app.config import get_settings
from chain import rpc
from chain.chains import get_chain

logger = logging.getLogger(__name__)

TRANSFER_GAS_LIMIT = 21_000


class BalanceInfo(BaseModel):
    model_config = ConfigDict(extra="forbid")

    balance_native: Decimal
    chain_name: str
    token_symbol: str


class BalanceLookup(Protocol):
    """Structural type for native balance providers."""

    async def get_balance(self, address: str, chain_id: int) -> BalanceInfo: ...


class GasEstimator(Protocol):
    """Structural type for transfer gas estimators (result in native units)."""

    async def estimate_gas(self, chain_id: int) -> Decimal: ...


def fetch_native_balance(address: str, chain_id: int) -> BalanceInfo:
    """
    Blocking balance lookup. Raises UnsupportedChainError / Web3RPCError.
    """
    chain = get_chain(chain_id)
    balance_wei = int(rpc.get_native_balance(chain_id, address))
    return BalanceInfo(
        balance_native=Decimal(str(Web3.from_wei(balance_wei, "ether"))),
        chain_name=chain.name,
        token_symbol=chain.native_symbol,
    )


def estimate_transfer_gas(chain_id: int) -> Decimal:
    """
    Advisory gas cost of a plain native transfer, in native units.

    A configured static estimate wins over a live gas price quote.
    """
    get_chain(chain_id)
    static = get_settings().static_gas_estimate_for_chain(chain_id)
    if static is not None:
        return static
    gas_price_wei = rpc.get_gas_price(chain_id)
    return Decimal(str(Web3.from_wei(gas_price_wei * TRANSFER_GAS_LIMIT, "ether")))


class RpcBalanceLookup:
    async def get_balance(self, address: str, chain_id: int) -> BalanceInfo:
        logger.info("balance lookup chain_id=%s address=%s", chain_id, address)
        return await asyncio.to_thread(fetch_native_balance, address, chain_id)


class RpcGasEstimator:
    async def estimate_gas(self, chain_id: int) -> Decimal:
        logger.info("gas estimate chain_id=%s", chain_id)
        return await asyncio.to_thread(estimate_transfer_gas, chain_id)
