import pytest

from backoffice.core.errors import KeyAlreadyUsed, KeyNotAllowed
from backoffice.models.product_key import ProductKey
from backoffice.models.user import ROLE_ADMIN, User
from backoffice.services.product_keys import ProductKeyLedger, normalize_key

ALLOWED = ("RPK-2024-ADMIN-001", "RPK-2024-ADMIN-002", "RPK-2024-DEMO-003")


def _make_user(db_session, email="owner@spicegarden.in") -> User:
    user = User(name="Owner", email=email, password_hash="x", role=ROLE_ADMIN, status="active")
    db_session.add(user)
    db_session.flush()
    return user


def test_key_outside_allow_list_is_rejected(db_session):
    ledger = ProductKeyLedger(db_session, ALLOWED)

    with pytest.raises(KeyNotAllowed):
        ledger.check_availability("RPK-2024-ADMIN-999")

    with pytest.raises(KeyNotAllowed):
        ledger.check_availability("")


def test_allow_list_match_is_exact_after_trimming(db_session):
    ledger = ProductKeyLedger(db_session, ALLOWED)

    assert ledger.check_availability("  RPK-2024-ADMIN-001 ").key == "RPK-2024-ADMIN-001"
    with pytest.raises(KeyNotAllowed):
        ledger.check_availability("rpk-2024-admin-001")


def test_unseeded_key_is_available_with_starter_plan(db_session):
    availability = ProductKeyLedger(db_session, ALLOWED).check_availability("RPK-2024-ADMIN-002")

    assert availability.plan == "starter"
    assert db_session.query(ProductKey).count() == 0


def test_seeded_key_reports_its_plan(db_session):
    ledger = ProductKeyLedger(db_session, ALLOWED)
    ledger.seed({"RPK-2024-DEMO-003": "enterprise"})
    db_session.commit()

    assert ledger.check_availability("RPK-2024-DEMO-003").plan == "enterprise"


def test_seed_skips_existing_and_rejects_unknown_plan(db_session):
    ledger = ProductKeyLedger(db_session, ALLOWED)
    first = ledger.seed({"RPK-2024-ADMIN-001": "starter"})
    second = ledger.seed({"RPK-2024-ADMIN-001": "starter"})

    assert len(first) == 1
    assert second == []
    with pytest.raises(ValueError):
        ledger.seed({"RPK-2024-ADMIN-002": "platinum"})


def test_redeem_unseeded_key_creates_used_record(db_session):
    ledger = ProductKeyLedger(db_session, ALLOWED)
    user = _make_user(db_session)

    record = ledger.redeem("RPK-2024-ADMIN-001", user.id)
    db_session.commit()

    assert record.key == "RPK-2024-ADMIN-001"
    assert record.is_used is True
    assert record.used_by_id == user.id
    assert record.used_at is not None


def test_redeem_seeded_key_marks_it_used(db_session):
    ledger = ProductKeyLedger(db_session, ALLOWED)
    ledger.seed({"RPK-2024-ADMIN-002": "professional"})
    user = _make_user(db_session)

    record = ledger.redeem("RPK-2024-ADMIN-002", user.id)
    db_session.commit()

    assert record.is_used is True
    assert record.plan == "professional"
    assert db_session.query(ProductKey).count() == 1


def test_key_can_only_be_redeemed_once(db_session):
    ledger = ProductKeyLedger(db_session, ALLOWED)
    first = _make_user(db_session)
    second = _make_user(db_session, email="intruso@spicegarden.in")

    ledger.redeem("RPK-2024-ADMIN-001", first.id)
    db_session.commit()

    with pytest.raises(KeyAlreadyUsed):
        ledger.check_availability("RPK-2024-ADMIN-001")
    with pytest.raises(KeyAlreadyUsed):
        ledger.redeem("RPK-2024-ADMIN-001", second.id)

    record = ledger.find("RPK-2024-ADMIN-001")
    assert record.used_by_id == first.id


def test_normalize_key_uppercases_and_strips():
    assert normalize_key("  rpk-2024-demo-001 ") == "RPK-2024-DEMO-001"
    assert normalize_key(None) == ""
