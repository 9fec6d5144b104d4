from __future__ import annotations

import asyncio
import logging
from typing import Any

from web3 import Web3

from app.chat.contracts import ChatRouteRequest, ChatRouteResponse, RouteKind, WalletContext
from app.chat.state_store import append_message
from app.chat.state_store import cleanup as cleanup_state
from app.config import get_settings
from app.contracts.preview import TransactionRequest
from app.contracts.slippage import SlippageRequest
from app.core.context import set_conversation_id
from app.services.preview_service import PreviewUnavailableError, build_transaction_preview
from app.services.slippage_service import (
    SlippageServiceError,
    compare_exchanges,
    detect_trade_side,
    format_comparison,
)
from chain.chains import UnsupportedChainError, chain_name, is_supported_chain, list_supported_chains
from chain.lookups import BalanceLookup, GasEstimator, RpcBalanceLookup, RpcGasEstimator
from guardian.formatting import format_amount
from intent.accumulator import accumulate
from intent.types import IntentKind, ResolvedIntent

_QUESTION_MAP = {
    "amount": "How much do you want to send?",
    "to_address": "Which address should I send it to? (0x followed by 40 hex characters)",
    "trading_pair": "Which trading pair do you want to compare (e.g., BTC/USDT)?",
    "trade_amount": "How much do you want to trade?",
}

_CONNECT_WALLET_MESSAGE = "Please connect your wallet first so I can check your balance and prepare transfers."

logger = logging.getLogger(__name__)


def _questions_for_missing_slots(missing_slots: list[str]) -> list[str]:
    questions = []
    for slot in missing_slots:
        question = _QUESTION_MAP.get(slot)
        if question:
            questions.append(question)
    if not questions:
        questions.append("Can you clarify what you want to do?")
    return questions


def _clarify_message(missing_slots: list[str], *, intro: str | None = None) -> str:
    questions = _questions_for_missing_slots(missing_slots)
    if len(questions) == 1:
        message = questions[0]
    else:
        message = "I need a bit more detail:\n" + "\n".join(f"- {q}" for q in questions)
    if intro:
        return f"{intro} {message}"
    return message


def _unsupported_chain_message(chain_id: int | None) -> str:
    supported = list_supported_chains()
    if supported:
        supported_list = ", ".join(f"{chain_name(cid)} ({cid})" for cid in supported)
        return f"Unsupported chain_id {chain_id}. Supported chains: {supported_list}."
    return f"Unsupported chain_id {chain_id}. Please switch to a supported chain."


def _rpc_unavailable_message(chain_id: int | None) -> str:
    return (
        f"Unable to reach the RPC for chain_id {chain_id}. "
        "Please try again in a moment."
    )


def _wallet_is_connected(wallet: WalletContext) -> bool:
    return bool(wallet.is_connected and wallet.address and Web3.is_address(wallet.address))


def _resolve_chain_id(wallet: WalletContext, resolved: ResolvedIntent) -> int:
    # The connected wallet's network wins over a chain named in the chat.
    if wallet.chain_id is not None:
        return wallet.chain_id
    if resolved.entities.chain_id is not None:
        return resolved.entities.chain_id
    return get_settings().default_chain_id


def _conversation_for(req: ChatRouteRequest) -> list[str]:
    if req.history is not None:
        return [*req.history, req.message]
    if req.conversation_id:
        return append_message(
            req.conversation_id,
            req.message,
            ttl_seconds=get_settings().conversation_ttl_seconds,
        )
    return [req.message]


def _response(
    req: ChatRouteRequest,
    resolved: ResolvedIntent,
    kind: RouteKind,
    **fields: Any,
) -> ChatRouteResponse:
    return ChatRouteResponse(
        kind=kind,
        intent=resolved.intent,
        confidence=resolved.confidence,
        entities=resolved.entities,
        conversation_id=req.conversation_id,
        **fields,
    )


async def _route_send(
    req: ChatRouteRequest,
    resolved: ResolvedIntent,
    *,
    balance_lookup: BalanceLookup,
    gas_estimator: GasEstimator,
) -> ChatRouteResponse:
    wallet = req.wallet_context
    if not _wallet_is_connected(wallet):
        return _response(
            req,
            resolved,
            RouteKind.REPLY,
            assistant_message=_CONNECT_WALLET_MESSAGE,
            reason="wallet_not_connected",
        )

    entities = resolved.entities
    missing_slots = []
    if entities.amount is None:
        missing_slots.append("amount")
    if entities.to_address is None:
        missing_slots.append("to_address")
    if missing_slots:
        questions = _questions_for_missing_slots(missing_slots)
        return _response(
            req,
            resolved,
            RouteKind.REPLY,
            assistant_message=_clarify_message(missing_slots, intro="I can prepare that transfer."),
            questions=questions,
            missing_slots=missing_slots,
            reason="missing_required_slots",
        )

    chain_id = _resolve_chain_id(wallet, resolved)
    if not is_supported_chain(chain_id):
        return _response(
            req,
            resolved,
            RouteKind.REPLY,
            assistant_message=_unsupported_chain_message(chain_id),
            reason="unsupported_chain",
        )

    tx_request = TransactionRequest(
        from_address=wallet.address,
        to_address=entities.to_address,
        amount=entities.amount,
        chain_id=chain_id,
        token_symbol=entities.token,
    )
    try:
        preview = await build_transaction_preview(
            tx_request,
            balance_lookup=balance_lookup,
            gas_estimator=gas_estimator,
        )
    except UnsupportedChainError:
        return _response(
            req,
            resolved,
            RouteKind.REPLY,
            assistant_message=_unsupported_chain_message(chain_id),
            reason="unsupported_chain",
        )
    except PreviewUnavailableError as exc:
        logger.warning("send preview unavailable chain_id=%s error=%s", chain_id, exc)
        return _response(
            req,
            resolved,
            RouteKind.REPLY,
            assistant_message=_rpc_unavailable_message(chain_id),
            reason="preview_unavailable",
            retryable=True,
        )

    return _response(
        req,
        resolved,
        RouteKind.PREVIEW,
        assistant_message=preview.summary,
        preview=preview,
    )


async def _route_balance(
    req: ChatRouteRequest,
    resolved: ResolvedIntent,
    *,
    balance_lookup: BalanceLookup,
) -> ChatRouteResponse:
    wallet = req.wallet_context
    if not _wallet_is_connected(wallet):
        return _response(
            req,
            resolved,
            RouteKind.REPLY,
            assistant_message=_CONNECT_WALLET_MESSAGE,
            reason="wallet_not_connected",
        )

    chain_id = _resolve_chain_id(wallet, resolved)
    try:
        info = await balance_lookup.get_balance(wallet.address, chain_id)
    except UnsupportedChainError:
        return _response(
            req,
            resolved,
            RouteKind.REPLY,
            assistant_message=_unsupported_chain_message(chain_id),
            reason="unsupported_chain",
        )
    except Exception as exc:
        logger.warning("balance lookup failed chain_id=%s error=%s", chain_id, exc)
        return _response(req, resolved, RouteKind.DEFER, reason="balance_unavailable", retryable=True)

    return _response(
        req,
        resolved,
        RouteKind.REPLY,
        assistant_message=(
            f"Your balance on {info.chain_name} is "
            f"{format_amount(info.balance_native)} {info.token_symbol}."
        ),
        data={
            "balance": str(info.balance_native),
            "token_symbol": info.token_symbol,
            "chain_id": chain_id,
            "chain_name": info.chain_name,
        },
    )


async def _route_consult(req: ChatRouteRequest, resolved: ResolvedIntent) -> ChatRouteResponse:
    entities = resolved.entities
    missing_slots = []
    if entities.trading_pair is None:
        missing_slots.append("trading_pair")
    if entities.amount is None:
        missing_slots.append("trade_amount")
    if missing_slots:
        return _response(
            req,
            resolved,
            RouteKind.DEFER,
            questions=_questions_for_missing_slots(missing_slots),
            missing_slots=missing_slots,
            reason="missing_required_slots",
        )

    slippage_request = SlippageRequest(
        symbol=entities.trading_pair,
        amount=float(entities.amount),
        side=detect_trade_side(req.message),
    )
    try:
        comparison = await asyncio.to_thread(compare_exchanges, slippage_request)
    except SlippageServiceError as exc:
        logger.warning("slippage comparison failed symbol=%s error=%s", slippage_request.symbol, exc)
        return _response(req, resolved, RouteKind.DEFER, reason="slippage_unavailable", retryable=True)

    return _response(
        req,
        resolved,
        RouteKind.REPLY,
        assistant_message=format_comparison(comparison, slippage_request),
        data={"comparison": comparison.model_dump(mode="json")},
    )


async def route_chat(
    req: ChatRouteRequest,
    *,
    balance_lookup: BalanceLookup | None = None,
    gas_estimator: GasEstimator | None = None,
) -> ChatRouteResponse:
    """
    Resolve the conversation and decide what the chat UI should do next:
    reply directly, show a transaction preview, or defer to the general
    assistant.
    """
    if req.conversation_id:
        set_conversation_id(req.conversation_id)
    cleanup_state()

    conversation = _conversation_for(req)
    resolved = accumulate(conversation)
    logger.info(
        "chat route intent=%s confidence=%.2f turns=%s",
        resolved.intent.value,
        resolved.confidence,
        resolved.turns,
    )

    balance_lookup = balance_lookup or RpcBalanceLookup()
    gas_estimator = gas_estimator or RpcGasEstimator()

    if resolved.intent == IntentKind.SEND:
        return await _route_send(
            req,
            resolved,
            balance_lookup=balance_lookup,
            gas_estimator=gas_estimator,
        )
    if resolved.intent == IntentKind.GET_BALANCE:
        return await _route_balance(req, resolved, balance_lookup=balance_lookup)
    if resolved.intent == IntentKind.CONSULT_SLIPPAGE:
        return await _route_consult(req, resolved)

    return _response(req, resolved, RouteKind.DEFER, reason="no_direct_handler")
