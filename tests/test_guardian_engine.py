from decimal import Decimal

from guardian.engine import validate_transaction
from guardian.types import GuardianSeverity

SENDER = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
RECIPIENT = "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359"


def _validate(**overrides):
    params = dict(
        from_address=SENDER,
        to_address=RECIPIENT,
        amount=Decimal("0.1"),
        chain_id=1,
        token_symbol="ETH",
        current_balance=Decimal("1.0"),
        gas_estimate=Decimal("0.00021"),
    )
    params.update(overrides)
    return validate_transaction(**params)


def test_routine_transfer_is_valid_with_standing_network_warning():
    result = _validate()

    assert result.valid
    assert result.issues == []
    assert len(result.warnings) == 1
    assert not result.requires_double_confirm
    assert result.severity == GuardianSeverity.MEDIUM


def test_insufficient_balance_is_critical():
    result = _validate(current_balance=Decimal("0.05"))

    assert not result.valid
    assert result.severity == GuardianSeverity.CRITICAL
    assert any("Shortfall: 0.050242 ETH" in issue for issue in result.issues)


def test_invalid_recipient_is_critical():
    result = _validate(to_address="0x1234")

    assert not result.valid
    assert result.severity == GuardianSeverity.CRITICAL
    assert "Invalid address format" in result.issues[0]


def test_non_positive_amount_blocks_transfer():
    result = _validate(amount=Decimal("0"))

    assert not result.valid
    assert "Amount must be greater than 0." in result.issues


def test_self_transfer_warns():
    result = _validate(to_address=SENDER.lower())

    assert result.valid
    assert any("your own address" in w for w in result.warnings)
    assert result.severity == GuardianSeverity.MEDIUM


def test_high_share_of_balance_is_high_severity():
    result = _validate(amount=Decimal("0.96"), current_balance=Decimal("1.0"), gas_estimate=Decimal("0.001"))

    assert result.valid
    assert result.requires_double_confirm
    assert result.severity == GuardianSeverity.HIGH


def test_balance_checks_skipped_when_unknown():
    result = _validate(current_balance=None, gas_estimate=None, amount=Decimal("50"))

    assert result.valid
    assert not result.requires_double_confirm
    assert len(result.warnings) == 1


def test_zero_balance_is_known_and_checked():
    result = _validate(current_balance=Decimal("0"))

    assert not result.valid
    assert any("Insufficient balance" in issue for issue in result.issues)


def test_valid_exactly_when_no_issues():
    for overrides in (
        {},
        {"current_balance": Decimal("0.01")},
        {"to_address": "0x" + "0" * 40},
        {"amount": Decimal("200"), "current_balance": Decimal("1000")},
    ):
        result = _validate(**overrides)
        assert result.valid == (result.issue_count == 0)
        if not result.valid:
            assert result.severity == GuardianSeverity.CRITICAL


def test_fat_finger_amount_is_blocked_not_raised():
    for amount in (Decimal("1e22"), Decimal("1e25"), Decimal("1e29")):
        result = _validate(amount=amount, current_balance=Decimal("1"))

        assert not result.valid
        assert result.severity == GuardianSeverity.CRITICAL
        assert any("Insufficient balance" in issue for issue in result.issues)
        assert result.requires_double_confirm
