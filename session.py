"""
Session state

Login flags, cart, wishlist, coin wallet and display currency for one shopper.
Every field lives under its own snapshot key so a catalog reset never touches
a live session and the other way around.
"""
from datetime import datetime
from typing import Callable, List, Optional

from pydantic import NonNegativeInt

from schemas import CartItem, Currency, CurrentUser, Mission, Product, RememberedLogin
from seed import default_missions

DEFAULT_COINS = 2100


def _merge_duplicates(items: List[CartItem]) -> List[CartItem]:
    merged = {}
    for item in items:
        if item.id in merged:
            merged[item.id] = merged[item.id].model_copy(update={"quantity": merged[item.id].quantity + item.quantity})
        else:
            merged[item.id] = item
    return list(merged.values())


class SessionState:
    def __init__(self, snapshots, on_login_required: Optional[Callable[[], None]] = None):
        self.snapshots = snapshots
        self.on_login_required = on_login_required
        self.login_prompt_open = False

        self.is_logged_in: bool = snapshots.load("user_session", False, bool)
        self.is_admin: bool = snapshots.load("admin_session", False, bool)
        self.cart: List[CartItem] = _merge_duplicates(snapshots.load("cart", [], List[CartItem]))
        wishlist = snapshots.load("wishlist", [], List[Product])
        self.wishlist: List[Product] = list({p.id: p for p in wishlist}.values())
        self.coins: int = snapshots.load("user_coins", DEFAULT_COINS, NonNegativeInt)
        self.currency: Currency = snapshots.load("currency", "BDT", Currency)
        self.last_check_in: Optional[datetime] = snapshots.load("last_coin_claim_time", None, Optional[datetime])
        self.missions: List[Mission] = snapshots.load("coin_missions", None, List[Mission]) or default_missions()
        self.collected_rewards: List[str] = snapshots.load("collected_rewards", [], List[str])
        self.remembered: Optional[RememberedLogin] = snapshots.load("public_remember_me", None, Optional[RememberedLogin])
        self.current_user: Optional[CurrentUser] = snapshots.load("current_user", None, Optional[CurrentUser])

    def request_login(self) -> None:
        self.login_prompt_open = True
        if self.on_login_required is not None:
            self.on_login_required()

    def set_is_logged_in(self, value: bool) -> None:
        # cart and wishlist survive a logout
        self.is_logged_in = value
        self.snapshots.save("user_session", value)
        if value:
            self.login_prompt_open = False

    def set_admin(self, value: bool) -> None:
        self.is_admin = value
        self.snapshots.save("admin_session", value)

    def set_cart(self, items: List[CartItem]) -> None:
        self.cart = list(items)
        self.snapshots.save("cart", self.cart)

    def set_wishlist(self, items: List[Product]) -> None:
        self.wishlist = list(items)
        self.snapshots.save("wishlist", self.wishlist)

    def set_coins(self, coins: int) -> None:
        self.coins = max(0, int(coins))
        self.snapshots.save("user_coins", self.coins)

    def set_currency(self, currency: Currency) -> None:
        self.currency = currency
        self.snapshots.save("currency", currency)

    def set_last_check_in(self, at: datetime) -> None:
        self.last_check_in = at
        self.snapshots.save("last_coin_claim_time", at)

    def set_missions(self, missions: List[Mission]) -> None:
        self.missions = list(missions)
        self.snapshots.save("coin_missions", self.missions)

    def set_collected_rewards(self, product_ids: List[str]) -> None:
        self.collected_rewards = list(product_ids)
        self.snapshots.save("collected_rewards", self.collected_rewards)

    def set_current_user(self, user: Optional[CurrentUser]) -> None:
        self.current_user = user
        self.snapshots.save("current_user", user)

    def set_remembered(self, remembered: Optional[RememberedLogin]) -> None:
        self.remembered = remembered
        if remembered is None:
            self.snapshots.delete("public_remember_me")
        else:
            self.snapshots.save("public_remember_me", remembered)
