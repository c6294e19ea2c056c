from datetime import datetime, timezone

from auth import AdminLoginOutcome, LoginOutcome, SignupOutcome
from schemas import SocialAccount
from security import generate_totp_secret, get_password_hash, totp_code, verify_password, verify_totp

RFC_SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


def test_login_outcomes(store, catalog):
    assert store.auth.login("nobody@example.com", "x") is LoginOutcome.NO_ACCOUNT
    assert store.auth.login("md4518199@gmail.com", "wrong") is LoginOutcome.WRONG_PASSWORD
    assert not store.session.is_logged_in

    catalog.customers.update("c1", status="blocked")
    assert store.auth.login("md4518199@gmail.com", "password123") is LoginOutcome.BLOCKED
    assert not store.session.is_logged_in


def test_login_starts_session(store):
    assert store.auth.login("MD4518199@gmail.com", "password123", remember=True) is LoginOutcome.OK
    assert store.session.is_logged_in
    assert store.session.current_user.name == "Md Samiul"
    assert store.session.remembered.email == "md4518199@gmail.com"

    store.auth.logout()
    assert not store.session.is_logged_in
    assert store.session.current_user is None
    assert store.auth.login("md4518199@gmail.com", "password123") is LoginOutcome.OK
    assert store.session.remembered is None


def test_password_hashes():
    hashed = get_password_hash("secret1")
    assert hashed != "secret1"
    assert verify_password("secret1", hashed)
    assert not verify_password("secret2", hashed)
    assert not verify_password("secret1", None)


def test_signup(store, catalog):
    auth = store.auth
    assert auth.signup("Rafi", "rafi@example.com", "abc123", "abc124") is SignupOutcome.PASSWORD_MISMATCH
    assert auth.signup("Rafi", "rafi@example.com", "abc", "abc") is SignupOutcome.PASSWORD_TOO_SHORT
    assert auth.signup("Rafi", "MD4518199@gmail.com", "abc123", "abc123") is SignupOutcome.EMAIL_TAKEN

    assert auth.signup("Rafi", "rafi@example.com", "abc123", "abc123") is SignupOutcome.OK
    customer = catalog.find_customer_by_email("rafi@example.com")
    assert customer.password != "abc123"
    assert customer.coins == 0
    assert store.session.is_logged_in
    assert store.coins.balance == 0

    auth.logout()
    assert auth.login("rafi@example.com", "abc123") is LoginOutcome.OK


def test_social_login(store, catalog):
    account = SocialAccount(provider="Google", name="Nadia", email="nadia@example.com", avatar="https://x/y.png")
    assert store.auth.social_login(account) is LoginOutcome.OK
    assert store.session.is_logged_in
    assert store.session.current_user.email == "nadia@example.com"


def test_social_login_does_not_take_over_customer_wallet(store, catalog):
    store.session.set_coins(300)
    account = SocialAccount(provider="Google", name="Mallory", email="md4518199@gmail.com")
    assert store.auth.social_login(account) is LoginOutcome.OK
    assert store.coins.balance == 300

    store.coins.add_coins(-300)
    store.coins.claim_check_in()
    store.add_to_cart(catalog.find_product("p1"))
    store.place_order("Mallory", "md4518199@gmail.com", "01700000000", "Dhaka")
    customer = catalog.find_customer_by_email("md4518199@gmail.com")
    assert customer.coins == 4500
    assert customer.orders_count == 1


def test_social_login_disabled_provider(store, catalog):
    catalog.social_settings.update(facebook_enabled=False)
    account = SocialAccount(provider="Facebook", name="Nadia", email="nadia@example.com")
    assert store.auth.social_login(account) is LoginOutcome.PROVIDER_DISABLED
    assert not store.session.is_logged_in


def test_totp_reference_vector():
    at = datetime.fromtimestamp(59, tz=timezone.utc)
    assert totp_code(RFC_SECRET, at) == "287082"
    later = datetime.fromtimestamp(89, tz=timezone.utc)
    assert verify_totp(RFC_SECRET, "287082", later)
    much_later = datetime.fromtimestamp(150, tz=timezone.utc)
    assert not verify_totp(RFC_SECRET, "287082", much_later)


def test_admin_login_without_2fa(store):
    assert store.auth.admin_login("admin@superstore.com", "nope") is AdminLoginOutcome.INVALID_CREDENTIALS
    assert store.auth.admin_login("admin@superstore.com", "admin123") is AdminLoginOutcome.OK
    assert store.session.is_admin
    store.auth.admin_logout()
    assert not store.session.is_admin


def test_admin_login_with_2fa(store, clock):
    secret = generate_totp_secret()
    assert not store.two_factor.enable(secret, "000000x", at=clock.now())
    assert store.two_factor.enable(secret, totp_code(secret, clock.now()), at=clock.now())

    auth = store.auth
    assert auth.admin_login("admin@superstore.com", "admin123", at=clock.now()) is AdminLoginOutcome.CODE_REQUIRED
    valid = {totp_code(secret, clock.now(), k) for k in (-1, 0, 1)}
    bad = next(c for c in ("000000", "111111", "222222", "333333") if c not in valid)
    assert auth.admin_login("admin@superstore.com", "admin123", bad, at=clock.now()) is AdminLoginOutcome.INVALID_CODE
    assert not store.session.is_admin
    code = totp_code(secret, clock.now())
    assert auth.admin_login("admin@superstore.com", "admin123", code, at=clock.now()) is AdminLoginOutcome.OK

    store.two_factor.disable()
    assert not store.catalog.admin_profile.get().two_factor_enabled


def test_provisioning_uri(store):
    setup = store.two_factor.new_secret()
    assert setup["uri"].startswith("otpauth://totp/SuperStore:admin%40dronestore.com?")
    assert "secret=" + setup["secret"] in setup["uri"]
    assert "issuer=SuperStore" in setup["uri"]
