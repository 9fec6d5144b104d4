from decimal import Decimal

from intent.accumulator import accumulate
from intent.types import IntentKind

ADDRESS = "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359"


def test_single_turn_transfer():
    resolved = accumulate([f"kirim 0.1 ETH ke {ADDRESS}"])

    assert resolved.intent == IntentKind.SEND
    assert resolved.confidence == 0.9
    assert resolved.entities.amount == Decimal("0.1")
    assert resolved.entities.to_address == ADDRESS
    assert resolved.is_send_ready
    assert resolved.turns == 1


def test_slots_collected_over_several_turns():
    resolved = accumulate(["kirim 0.5 LSK", f"ke {ADDRESS}"])

    assert resolved.intent == IntentKind.SEND
    assert resolved.confidence == 0.8
    assert resolved.entities.amount == Decimal("0.5")
    assert resolved.entities.token == "LSK"
    assert resolved.entities.to_address == ADDRESS
    assert resolved.is_send_ready


def test_latest_mention_wins():
    resolved = accumulate(["kirim 0.5 LSK", "eh 0.2 aja", f"ke {ADDRESS}"])
    assert resolved.entities.amount == Decimal("0.2")


def test_explicit_chain_not_overwritten_by_default():
    resolved = accumulate(["kirim 1 di arbitrum", f"ke {ADDRESS}"])
    assert resolved.entities.chain_id == 42161


def test_default_chain_when_never_mentioned():
    resolved = accumulate([f"kirim 1 ke {ADDRESS}"])
    assert resolved.entities.chain_id == 4202
    assert resolved.entities.chain_name == "Lisk Sepolia"


def test_confirmation_after_consultation_stays_consultation():
    resolved = accumulate(["mana exchange terbaik untuk beli BTC/USDT", "ok 2"])

    assert resolved.intent == IntentKind.CONSULT_SLIPPAGE
    assert resolved.confidence == 0.9
    assert resolved.continued_from_consultation
    assert resolved.entities.trading_pair == "BTC/USDT"
    assert resolved.entities.amount == Decimal("2")
    assert not resolved.is_send_ready


def test_pair_follow_up_continues_consultation():
    resolved = accumulate(["bandingkan exchange dong", "BTC/USDT"])

    assert resolved.intent == IntentKind.CONSULT_SLIPPAGE
    assert resolved.confidence == 0.8
    assert resolved.continued_from_consultation


def test_first_consultation_turn_is_not_a_continuation():
    resolved = accumulate(["mana exchange terbaik untuk BTC/USDT"])
    assert resolved.intent == IntentKind.CONSULT_SLIPPAGE
    assert not resolved.continued_from_consultation


def test_address_with_39_hex_digits_never_becomes_a_destination():
    resolved = accumulate(["kirim 0.1 ETH ke 0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb"])

    assert resolved.intent == IntentKind.SEND
    assert resolved.entities.to_address is None
    assert not resolved.is_send_ready


def test_balance_question_is_not_upgraded_to_send():
    resolved = accumulate([f"kirim 1 ke {ADDRESS}", "cek saldo dulu"])
    assert resolved.intent == IntentKind.GET_BALANCE


def test_empty_conversation():
    resolved = accumulate([])
    assert resolved.intent == IntentKind.UNKNOWN
    assert resolved.confidence == 0.3
    assert resolved.turns == 0
    assert resolved.entities.chain_id == 4202


def test_accumulate_is_deterministic():
    conversation = ["kirim 0.5 LSK", f"ke {ADDRESS}"]
    assert accumulate(conversation) == accumulate(conversation)


def test_implicit_send_after_consultation_stays_consultation():
    resolved = accumulate(["bandingkan exchange dong", f"kirim 1 ke {ADDRESS}", "hmm"])

    assert resolved.intent == IntentKind.CONSULT_SLIPPAGE
    assert resolved.confidence == 0.9
    assert resolved.continued_from_consultation
    assert resolved.entities.amount == Decimal("1")
    assert resolved.entities.to_address == ADDRESS
    assert not resolved.is_send_ready
