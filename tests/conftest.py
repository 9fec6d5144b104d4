from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.chat import state_store
from app.config import get_settings
from app.main import create_app
from chain.lookups import BalanceInfo

SENDER = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
RECIPIENT = "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359"


class FakeBalanceLookup:
    def __init__(self, balance="1.0", *, chain_name="Lisk Sepolia", token_symbol="LSK", error=None):
        self.balance = Decimal(str(balance))
        self.chain_name = chain_name
        self.token_symbol = token_symbol
        self.error = error
        self.calls = []

    async def get_balance(self, address, chain_id):
        self.calls.append((address, chain_id))
        if self.error is not None:
            raise self.error
        return BalanceInfo(
            balance_native=self.balance,
            chain_name=self.chain_name,
            token_symbol=self.token_symbol,
        )


class FakeGasEstimator:
    def __init__(self, gas="0.00021", *, error=None):
        self.gas = Decimal(str(gas))
        self.error = error
        self.calls = []

    async def estimate_gas(self, chain_id):
        self.calls.append(chain_id)
        if self.error is not None:
            raise self.error
        return self.gas


@pytest.fixture
def client():
    app = create_app()
    with TestClient(app) as client:
        yield client


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    monkeypatch.setenv("DEFAULT_CHAIN_ID", "4202")
    monkeypatch.setenv("RPC_URLS", "")
    monkeypatch.setenv("STATIC_GAS_ESTIMATES", "")
    get_settings.cache_clear()
    state_store._STORE.clear()
    yield
    get_settings.cache_clear()
    state_store._STORE.clear()


@pytest.fixture
def balance_lookup_cls():
    return FakeBalanceLookup


@pytest.fixture
def gas_estimator_cls():
    return FakeGasEstimator


@pytest.fixture
def sender():
    return SENDER


@pytest.fixture
def recipient():
    return RECIPIENT
