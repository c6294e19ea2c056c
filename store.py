from typing import Callable, Optional

from auth import Auth, TwoFactorSetup
from cart import CartEngine
from catalog import Catalog
from coins import Clock, CoinEconomy
from currency import CurrencyService
from database import SnapshotStore, default_blobs
from orders import OrderPlacement
from session import SessionState


class Store:
    """Everything one shopper's screens read and mutate.

    The catalog is shared; session keys are namespaced under
    ``session:<id>:`` in the same snapshot store.
    """

    def __init__(self, catalog: Catalog, snapshots: SnapshotStore, session_id: Optional[str] = None,
                 clock: Optional[Clock] = None, on_login_required: Optional[Callable[[], None]] = None):
        self.catalog = catalog
        self.session_id = session_id
        session_snapshots = snapshots.scoped(f"session:{session_id}:") if session_id else snapshots
        self.session = SessionState(session_snapshots, on_login_required=on_login_required)
        self.clock = clock or Clock()
        self.currency = CurrencyService(self.session)
        self.cart = CartEngine(self.session)
        self.coins = CoinEconomy(self.session, catalog, clock=self.clock)
        self.orders = OrderPlacement(self.session, catalog, self.cart, self.coins, clock=self.clock)
        self.auth = Auth(self.session, catalog, self.coins)
        self.two_factor = TwoFactorSetup(catalog)

    @classmethod
    def open(cls, blobs=None, session_id: Optional[str] = None, clock: Optional[Clock] = None) -> "Store":
        snapshots = SnapshotStore(blobs if blobs is not None else default_blobs())
        return cls(Catalog(snapshots), snapshots, session_id=session_id, clock=clock)

    # Shortcuts used by most screens
    def add_to_cart(self, product, quantity: int = 1) -> bool:
        return self.cart.add_to_cart(product, quantity)

    def toggle_wishlist(self, product) -> bool:
        return self.cart.toggle_wishlist(product)

    def place_order(self, customer_name: str, customer_email: str, customer_phone: str,
                    address: str, coins_to_use: int = 0):
        return self.orders.place_order(customer_name, customer_email, customer_phone, address, coins_to_use)

    def format_price(self, amount: float) -> str:
        return self.currency.format(amount)
