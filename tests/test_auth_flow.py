import pytest

from backoffice.core.errors import (
    AccountInactive,
    EmailTaken,
    InvalidCredentials,
    KeyAlreadyUsed,
    KeyNotAllowed,
    SubscriptionInactive,
    ValidationFailed,
)
from backoffice.models.product_key import ProductKey
from backoffice.models.restaurant import Restaurant
from backoffice.models.user import User
from backoffice.services.auth_flow import AuthenticationFlow, RegisterAdminCommand
from backoffice.services.product_keys import ProductKeyLedger
from backoffice.services.staff import StaffService
from backoffice.services.tokens import TokenService

from tests.fixtures_data import STRONG_PASSWORD

ALLOWED = ("RPK-2024-ADMIN-001", "RPK-2024-ADMIN-002")


def _flow(db_session, ledger=None) -> AuthenticationFlow:
    ledger = ledger or ProductKeyLedger(db_session, ALLOWED)
    return AuthenticationFlow(db_session, ledger, TokenService("flow-secret"))


def _command(**overrides) -> RegisterAdminCommand:
    values = {
        "name": "Ravi Sharma",
        "email": "Dono@SpiceGarden.in",
        "password": STRONG_PASSWORD,
        "product_key": "RPK-2024-ADMIN-001",
        "restaurant_name": "Spice Garden",
    }
    values.update(overrides)
    return RegisterAdminCommand(**values)


class _FailingLedger(ProductKeyLedger):
    def redeem(self, key, user_id):
        raise KeyAlreadyUsed()


def test_register_admin_creates_admin_restaurant_and_redeems_key(db_session):
    result = _flow(db_session).register_admin(_command())

    admin = db_session.query(User).one()
    restaurant = db_session.query(Restaurant).one()
    key = db_session.query(ProductKey).one()

    assert admin.email == "dono@spicegarden.in"
    assert admin.role == "admin"
    assert admin.restaurant_id == restaurant.id
    assert restaurant.admin_id == admin.id
    assert restaurant.subscription_plan == "starter"
    assert restaurant.subscription_status == "active"
    assert key.is_used is True and key.used_by_id == admin.id
    assert TokenService("flow-secret").verify(result.token) == admin.id
    assert "password_hash" not in result.user


def test_register_admin_takes_plan_from_seeded_key(db_session):
    ledger = ProductKeyLedger(db_session, ALLOWED)
    ledger.seed({"RPK-2024-ADMIN-002": "enterprise"})
    db_session.commit()

    _flow(db_session, ledger).register_admin(_command(product_key="RPK-2024-ADMIN-002"))

    assert db_session.query(Restaurant).one().subscription_plan == "enterprise"


def test_register_admin_with_unknown_key_has_no_side_effects(db_session):
    with pytest.raises(KeyNotAllowed):
        _flow(db_session).register_admin(_command(product_key="RPK-2024-FAKE-000"))

    assert db_session.query(User).count() == 0
    assert db_session.query(Restaurant).count() == 0
    assert db_session.query(ProductKey).count() == 0


def test_register_admin_rolls_back_when_redemption_fails(db_session):
    ledger = _FailingLedger(db_session, ALLOWED)

    with pytest.raises(KeyAlreadyUsed):
        _flow(db_session, ledger).register_admin(_command())

    assert db_session.query(User).count() == 0
    assert db_session.query(Restaurant).count() == 0


def test_register_admin_rejects_duplicate_email(db_session):
    _flow(db_session).register_admin(_command())

    with pytest.raises(EmailTaken):
        _flow(db_session).register_admin(_command(email="dono@spicegarden.in", product_key="RPK-2024-ADMIN-002"))

    # a segunda chave continua livre
    assert ProductKeyLedger(db_session, ALLOWED).check_availability("RPK-2024-ADMIN-002").plan == "starter"


def test_login_failures_are_indistinguishable(db_session):
    flow = _flow(db_session)
    flow.register_admin(_command())

    with pytest.raises(InvalidCredentials) as unknown_email:
        flow.login("ninguem@spicegarden.in", STRONG_PASSWORD)
    with pytest.raises(InvalidCredentials) as wrong_password:
        flow.login("dono@spicegarden.in", "Errada123")

    assert unknown_email.value.message == wrong_password.value.message
    assert unknown_email.value.status_code == wrong_password.value.status_code == 401


def test_login_updates_last_login(db_session):
    flow = _flow(db_session)
    flow.register_admin(_command())

    result = flow.login("DONO@spicegarden.in", STRONG_PASSWORD)

    assert result.user["last_login_at"] is not None


def test_inactive_account_cannot_login(db_session):
    flow = _flow(db_session)
    flow.register_admin(_command())
    admin = db_session.query(User).one()
    admin.status = "inactive"
    db_session.commit()

    with pytest.raises(AccountInactive):
        flow.login("dono@spicegarden.in", STRONG_PASSWORD)


def test_staff_login_is_blocked_when_subscription_is_not_active(db_session):
    flow = _flow(db_session)
    flow.register_admin(_command())
    admin = db_session.query(User).one()
    StaffService(db_session).register_staff(
        admin, name="Priya Nair", email="priya@spicegarden.in", password="caixa123", role="cashier"
    )

    restaurant = db_session.query(Restaurant).one()
    restaurant.subscription_status = "suspended"
    db_session.commit()

    with pytest.raises(SubscriptionInactive):
        flow.login("priya@spicegarden.in", "caixa123")

    # o admin dono continua entrando para regularizar a assinatura
    assert flow.login("dono@spicegarden.in", STRONG_PASSWORD).token


def test_update_password_requires_current_password(db_session):
    flow = _flow(db_session)
    flow.register_admin(_command())
    admin = db_session.query(User).one()

    with pytest.raises(InvalidCredentials) as exc:
        flow.update_password(admin.id, "Errada123", "NovaSenha1")
    assert exc.value.status_code == 400

    flow.update_password(admin.id, STRONG_PASSWORD, "NovaSenha1")

    assert flow.login("dono@spicegarden.in", "NovaSenha1").token
    with pytest.raises(InvalidCredentials):
        flow.login("dono@spicegarden.in", STRONG_PASSWORD)


def test_current_user_profile_embeds_restaurant(db_session):
    flow = _flow(db_session)
    flow.register_admin(_command())
    admin = db_session.query(User).one()

    profile = flow.current_user_profile(admin)

    assert profile["restaurant"]["name"] == "Spice Garden"
    assert profile["restaurant"]["subscription"]["plan"] == "starter"


@pytest.mark.parametrize("salary", [0, -1500.0])
def test_staff_service_rejects_non_positive_salary(db_session, salary):
    _flow(db_session).register_admin(_command())
    admin = db_session.query(User).one()
    service = StaffService(db_session)

    with pytest.raises(ValidationFailed):
        service.register_staff(
            admin, name="Priya Nair", email="priya@spicegarden.in", password="caixa123", role="cashier", salary=salary
        )
    assert db_session.query(User).count() == 1

    staff = service.register_staff(
        admin, name="Priya Nair", email="priya@spicegarden.in", password="caixa123", role="cashier", salary=100
    )
    with pytest.raises(ValidationFailed):
        service.update_staff(admin, staff["id"], salary=salary)
    assert db_session.query(User).filter(User.id == staff["id"]).one().salary == 100
