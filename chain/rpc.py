from __future__ import annotations

from functools import lru_cache

from web3 import Web3

from chain.chains import get_rpc_url


class Web3RPCError(RuntimeError):
    pass


@lru_cache
def _get_web3(rpc_url: str) -> Web3:
    """
    Lazily create and cache a Web3 instance per RPC endpoint.
    """
    return Web3(Web3.HTTPProvider(rpc_url))


def _connected_web3(chain_id: int) -> Web3:
    w3 = _get_web3(get_rpc_url(chain_id))
    if not w3.is_connected():
        raise Web3RPCError(f"Unable to connect to RPC for chain_id={chain_id}")
    return w3


def get_native_balance(chain_id: int, address: str) -> int:
    """
    Return native token balance in wei.
    """
    w3 = _connected_web3(chain_id)
    try:
        return w3.eth.get_balance(Web3.to_checksum_address(address))
    except Exception as e:
        raise Web3RPCError(f"get_native_balance failed: {e}") from e


def get_gas_price(chain_id: int) -> int:
    """
    Return the current gas price in wei (legacy gasPrice, or
    baseFee + priority fee on EIP-1559 chains).
    """
    w3 = _connected_web3(chain_id)
    try:
        block = w3.eth.get_block("latest")
        base_fee = block.get("baseFeePerGas")
        if base_fee is not None:
            try:
                max_priority = w3.eth.max_priority_fee
            except Exception:
                max_priority = max(w3.eth.gas_price - base_fee, 0)
            return int(base_fee + max_priority)
        return int(w3.eth.gas_price)
    except Exception as e:
        raise Web3RPCError(f"get_gas_price failed: {e}") from e
