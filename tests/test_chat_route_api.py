from __future__ import annotations

from unittest.mock import patch

import pytest

from app.chat.contracts import ChatRouteRequest, RouteKind, WalletContext
from app.chat.router import route_chat
from app.contracts.slippage import SlippageResponse
from app.services.slippage_service import SlippageServiceError
from chain.rpc import Web3RPCError

SENDER = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
RECIPIENT = "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359"
CONNECTED = {"address": SENDER, "chain_id": 4202, "is_connected": True}


def _post(client, message, **payload):
    return client.post("/v1/chat/route", json={"message": message, **payload})


def test_send_returns_preview(client, balance_lookup_cls, gas_estimator_cls):
    with (
        patch("app.chat.router.RpcBalanceLookup", return_value=balance_lookup_cls("1.0")),
        patch("app.chat.router.RpcGasEstimator", return_value=gas_estimator_cls("0.00021")),
    ):
        resp = _post(client, f"kirim 0.1 LSK ke {RECIPIENT}", wallet_context=CONNECTED)

    assert resp.status_code == 200
    body = resp.json()
    assert body["kind"] == RouteKind.PREVIEW.value
    assert body["intent"] == "SEND"
    assert body["entities"]["to_address"] == RECIPIENT
    assert body["preview"]["success"] is True
    assert body["preview"]["preview"]["chain_id"] == 4202
    assert body["preview"]["validations"]["severity"] == "medium"
    assert body["assistant_message"].startswith("Transaction preview")


def test_send_without_wallet_asks_to_connect(client):
    resp = _post(client, f"kirim 0.1 LSK ke {RECIPIENT}")

    body = resp.json()
    assert body["kind"] == RouteKind.REPLY.value
    assert body["reason"] == "wallet_not_connected"
    assert "connect your wallet" in body["assistant_message"]
    assert body["preview"] is None


def test_send_with_missing_destination_asks_for_it(client):
    resp = _post(client, "kirim 0.5 LSK", wallet_context=CONNECTED)

    body = resp.json()
    assert body["kind"] == RouteKind.REPLY.value
    assert body["reason"] == "missing_required_slots"
    assert body["missing_slots"] == ["to_address"]
    assert len(body["questions"]) == 1


def test_send_slots_accumulate_across_requests(client, balance_lookup_cls, gas_estimator_cls):
    first = _post(client, "kirim 0.5 LSK", conversation_id="conv-1", wallet_context=CONNECTED)
    assert first.json()["missing_slots"] == ["to_address"]

    with (
        patch("app.chat.router.RpcBalanceLookup", return_value=balance_lookup_cls("2")),
        patch("app.chat.router.RpcGasEstimator", return_value=gas_estimator_cls()),
    ):
        second = _post(client, f"ke {RECIPIENT}", conversation_id="conv-1", wallet_context=CONNECTED)

    body = second.json()
    assert body["kind"] == RouteKind.PREVIEW.value
    assert body["conversation_id"] == "conv-1"
    assert body["preview"]["preview"]["amount_formatted"] == "0.5 LSK"


def test_client_supplied_history_is_used(client, balance_lookup_cls, gas_estimator_cls):
    with (
        patch("app.chat.router.RpcBalanceLookup", return_value=balance_lookup_cls("2")),
        patch("app.chat.router.RpcGasEstimator", return_value=gas_estimator_cls()),
    ):
        resp = _post(
            client,
            f"ke {RECIPIENT}",
            history=["kirim 0.5 LSK"],
            wallet_context=CONNECTED,
        )

    assert resp.json()["kind"] == RouteKind.PREVIEW.value


def test_send_on_unsupported_chain(client):
    wallet = {**CONNECTED, "chain_id": 999}
    resp = _post(client, f"kirim 0.1 LSK ke {RECIPIENT}", wallet_context=wallet)

    body = resp.json()
    assert body["kind"] == RouteKind.REPLY.value
    assert body["reason"] == "unsupported_chain"
    assert "Unsupported chain_id 999" in body["assistant_message"]
    assert body["retryable"] is False


def test_send_when_rpc_is_down_is_retryable(client, balance_lookup_cls, gas_estimator_cls):
    with (
        patch(
            "app.chat.router.RpcBalanceLookup",
            return_value=balance_lookup_cls(error=Web3RPCError("rpc down")),
        ),
        patch("app.chat.router.RpcGasEstimator", return_value=gas_estimator_cls()),
    ):
        resp = _post(client, f"kirim 0.1 LSK ke {RECIPIENT}", wallet_context=CONNECTED)

    body = resp.json()
    assert body["kind"] == RouteKind.REPLY.value
    assert body["reason"] == "preview_unavailable"
    assert body["retryable"] is True


def test_balance_reply(client, balance_lookup_cls):
    with patch("app.chat.router.RpcBalanceLookup", return_value=balance_lookup_cls("1.5")):
        resp = _post(client, "cek saldo saya", wallet_context=CONNECTED)

    body = resp.json()
    assert body["kind"] == RouteKind.REPLY.value
    assert body["intent"] == "GET_BALANCE"
    assert body["assistant_message"] == "Your balance on Lisk Sepolia is 1.5 LSK."
    assert body["data"]["balance"] == "1.5"


def test_balance_without_wallet(client):
    resp = _post(client, "cek saldo saya")
    assert resp.json()["reason"] == "wallet_not_connected"


def test_balance_lookup_failure_defers(client, balance_lookup_cls):
    with patch(
        "app.chat.router.RpcBalanceLookup",
        return_value=balance_lookup_cls(error=Web3RPCError("rpc down")),
    ):
        resp = _post(client, "cek saldo saya", wallet_context=CONNECTED)

    body = resp.json()
    assert body["kind"] == RouteKind.DEFER.value
    assert body["reason"] == "balance_unavailable"


def test_consultation_with_pair_and_amount(client):
    oracle = SlippageResponse.model_validate(
        {
            "best_venue": "binance",
            "quotes": [
                {
                    "exchange": "binance",
                    "quote_price": 65100.0,
                    "predicted_slippage_pct": 0.05,
                    "total_cost": 130350.0,
                }
            ],
        }
    )
    with patch("app.chat.router.compare_exchanges", return_value=oracle) as compare:
        resp = _post(client, "mana exchange terbaik untuk beli 2 BTC/USDT")

    body = resp.json()
    assert body["kind"] == RouteKind.REPLY.value
    assert body["intent"] == "CONSULT_SLIPPAGE"
    assert "Recommended: BINANCE" in body["assistant_message"]
    request = compare.call_args.args[0]
    assert request.symbol == "BTC/USDT"
    assert request.amount == 2.0
    assert request.side == "buy"


def test_consultation_without_amount_defers_with_missing_slot(client):
    resp = _post(client, "mana exchange terbaik untuk BTC/USDT")

    body = resp.json()
    assert body["kind"] == RouteKind.DEFER.value
    assert body["missing_slots"] == ["trade_amount"]
    assert body["entities"]["trading_pair"] == "BTC/USDT"


def test_confirmation_after_consultation_never_sends(client):
    with patch(
        "app.chat.router.compare_exchanges",
        side_effect=SlippageServiceError("down"),
    ):
        resp = _post(
            client,
            "ok 2",
            history=["mana exchange terbaik untuk beli BTC/USDT"],
            wallet_context=CONNECTED,
        )

    body = resp.json()
    assert body["intent"] == "CONSULT_SLIPPAGE"
    assert body["kind"] == RouteKind.DEFER.value
    assert body["reason"] == "slippage_unavailable"
    assert body["preview"] is None


def test_unknown_and_swap_defer(client):
    for message in ("halo apa kabar", "tukar LSK jadi USDC"):
        body = _post(client, message).json()
        assert body["kind"] == RouteKind.DEFER.value
        assert body["reason"] == "no_direct_handler"


def test_stream_endpoint_emits_final_event(client):
    resp = client.post("/v1/chat/route/stream", json={"message": "halo"})

    assert resp.status_code == 200
    assert '"type": "status"' in resp.text
    assert '"type": "final"' in resp.text


@pytest.mark.asyncio
async def test_route_chat_accepts_injected_collaborators(balance_lookup_cls, gas_estimator_cls):
    lookup = balance_lookup_cls("3")
    req = ChatRouteRequest(
        message=f"send 1 LSK to {RECIPIENT}",
        wallet_context=WalletContext(address=SENDER, chain_id=4202, is_connected=True),
    )

    resp = await route_chat(req, balance_lookup=lookup, gas_estimator=gas_estimator_cls())

    assert resp.kind == RouteKind.PREVIEW
    assert resp.preview is not None
    assert lookup.calls == [(SENDER, 4202)]
