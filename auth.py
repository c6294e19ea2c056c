"""
Customer and admin sign-in.

Rejections are returned as outcome values for the caller to branch on, they
are never raised.
"""
import logging
import os
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from bson import ObjectId

from schemas import CurrentUser, RememberedLogin, SocialAccount
from security import (
    generate_totp_secret,
    get_password_hash,
    totp_provisioning_uri,
    verify_password,
    verify_totp,
)

logger = logging.getLogger(__name__)

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@superstore.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")
MIN_PASSWORD_LENGTH = 6


class LoginOutcome(str, Enum):
    OK = "ok"
    NO_ACCOUNT = "no_account"
    WRONG_PASSWORD = "wrong_password"
    BLOCKED = "blocked"
    PROVIDER_DISABLED = "provider_disabled"


class SignupOutcome(str, Enum):
    OK = "ok"
    PASSWORD_MISMATCH = "password_mismatch"
    PASSWORD_TOO_SHORT = "password_too_short"
    EMAIL_TAKEN = "email_taken"


class AdminLoginOutcome(str, Enum):
    OK = "ok"
    INVALID_CREDENTIALS = "invalid_credentials"
    CODE_REQUIRED = "code_required"
    INVALID_CODE = "invalid_code"


class Auth:
    def __init__(self, session, catalog, coins):
        self.session = session
        self.catalog = catalog
        self.coins = coins

    def _start_session(self, name: str, email: str, provider: Optional[str] = None) -> None:
        self.session.set_is_logged_in(True)
        self.session.set_current_user(CurrentUser(name=name, email=email, provider=provider))
        customer = self.coins.linked_customer()
        if customer is not None:
            self.coins.adopt_customer_coins(customer)

    def login(self, email: str, password: str, remember: bool = False) -> LoginOutcome:
        customer = self.catalog.find_customer_by_email(email)
        if customer is None:
            return LoginOutcome.NO_ACCOUNT
        if customer.status == "blocked":
            return LoginOutcome.BLOCKED
        if not verify_password(password, customer.password):
            return LoginOutcome.WRONG_PASSWORD

        self._start_session(customer.name, customer.email)
        self.session.set_remembered(RememberedLogin(email=customer.email) if remember else None)
        logger.info("Customer %s logged in", customer.id)
        return LoginOutcome.OK

    def signup(self, name: str, email: str, password: str, confirm_password: str) -> SignupOutcome:
        if password != confirm_password:
            return SignupOutcome.PASSWORD_MISMATCH
        if len(password) < MIN_PASSWORD_LENGTH:
            return SignupOutcome.PASSWORD_TOO_SHORT
        if self.catalog.find_customer_by_email(email) is not None:
            return SignupOutcome.EMAIL_TAKEN

        customer = self.catalog.customers.insert({
            "id": f"c{ObjectId()}",
            "name": name,
            "email": email,
            "password": get_password_hash(password),
            "date_joined": datetime.now(timezone.utc).date().isoformat(),
            "avatar": f"https://picsum.photos/seed/{email}/100/100",
            "status": "active",
            "coins": 0,
        })
        self._start_session(customer.name, customer.email)
        logger.info("Customer %s signed up", customer.id)
        return SignupOutcome.OK

    def social_login(self, account: SocialAccount) -> LoginOutcome:
        settings = self.catalog.social_settings.get()
        enabled = settings.google_enabled if account.provider == "Google" else settings.facebook_enabled
        if not enabled:
            return LoginOutcome.PROVIDER_DISABLED
        customer = self.catalog.find_customer_by_email(account.email)
        if customer is not None and customer.status == "blocked":
            return LoginOutcome.BLOCKED
        # social sessions keep their own wallet and never touch a customer record
        self._start_session(account.name, account.email, account.provider)
        logger.info("%s login for %s", account.provider, account.email)
        return LoginOutcome.OK

    def logout(self) -> None:
        self.session.set_is_logged_in(False)
        self.session.set_current_user(None)

    # Admin
    def admin_login(self, email: str, password: str, code: Optional[str] = None,
                    at: Optional[datetime] = None) -> AdminLoginOutcome:
        if email.lower() != ADMIN_EMAIL.lower() or password != ADMIN_PASSWORD:
            return AdminLoginOutcome.INVALID_CREDENTIALS
        profile = self.catalog.admin_profile.get()
        if profile.two_factor_enabled:
            if not code:
                return AdminLoginOutcome.CODE_REQUIRED
            if not verify_totp(profile.two_factor_secret, code, at or datetime.now(timezone.utc)):
                return AdminLoginOutcome.INVALID_CODE
        self.session.set_admin(True)
        logger.info("Admin session started")
        return AdminLoginOutcome.OK

    def admin_logout(self) -> None:
        self.session.set_admin(False)


class TwoFactorSetup:
    """Secret provisioning for the admin's authenticator app."""

    def __init__(self, catalog):
        self.catalog = catalog

    def new_secret(self) -> dict:
        secret = generate_totp_secret()
        return {"secret": secret, "uri": totp_provisioning_uri(secret, self.catalog.admin_profile.get().email)}

    def enable(self, secret: str, code: str, at: Optional[datetime] = None) -> bool:
        if not verify_totp(secret, code, at or datetime.now(timezone.utc)):
            return False
        self.catalog.admin_profile.update(two_factor_enabled=True, two_factor_secret=secret)
        return True

    def disable(self) -> None:
        self.catalog.admin_profile.update(two_factor_enabled=False)
