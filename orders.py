import logging
import os
from typing import Optional

from pydantic import BaseModel

from coins import Clock, coins_to_currency
from schemas import Order

logger = logging.getLogger(__name__)

FREE_SHIPPING_THRESHOLD = int(os.getenv("FREE_SHIPPING_THRESHOLD", 1000))
SHIPPING_FEE = int(os.getenv("SHIPPING_FEE", 25))


class OrderQuote(BaseModel):
    subtotal: int
    shipping: int
    usable_coins: int
    coins_used: int
    coin_discount: float
    total: float


def shipping_for(subtotal: int) -> int:
    return 0 if subtotal > FREE_SHIPPING_THRESHOLD else SHIPPING_FEE


class OrderPlacement:
    def __init__(self, session, catalog, cart, coins, clock: Optional[Clock] = None):
        self.session = session
        self.catalog = catalog
        self.cart = cart
        self.coins = coins
        self.clock = clock or coins.clock

    def quote(self, coins_to_use: int = 0) -> OrderQuote:
        """Checkout figures for the current cart; coins are clamped before the discount is taken."""
        subtotal = self.cart.subtotal()
        shipping = shipping_for(subtotal)
        usable = self.coins.usable_coins()
        coins_used = min(max(0, int(coins_to_use)), usable)
        coin_discount = coins_to_currency(coins_used)
        total = max(0, subtotal + shipping - coin_discount)
        return OrderQuote(
            subtotal=subtotal,
            shipping=shipping,
            usable_coins=usable,
            coins_used=coins_used,
            coin_discount=coin_discount,
            total=total,
        )

    def _next_order_id(self) -> str:
        stamp = int(self.clock.now().timestamp() * 1000)
        while self.catalog.find_order(f"ORD-{stamp}") is not None:
            stamp += 1
        return f"ORD-{stamp}"

    def place_order(self, customer_name: str, customer_email: str, customer_phone: str,
                    address: str, coins_to_use: int = 0) -> Optional[Order]:
        if not self.session.is_logged_in:
            self.session.request_login()
            return None
        if not self.session.cart:
            logger.info("Refusing to place an order for an empty cart")
            return None

        q = self.quote(coins_to_use)
        order = Order(
            id=self._next_order_id(),
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone=customer_phone,
            address=address,
            total=q.total,
            status="Paid",
            date=self.clock.now().date().isoformat(),
            items=[item.model_copy() for item in self.session.cart],
            coins_used=q.coins_used,
            coin_discount=q.coin_discount,
        )

        self.catalog.prepend_order(order)
        if q.coins_used > 0:
            self.coins.add_coins(-q.coins_used)
        self._count_order()
        self.cart.clear_cart()
        logger.info("Order %s placed: total %s, %s coins used", order.id, order.total, order.coins_used)
        return order

    def _count_order(self) -> None:
        customer = self.coins.linked_customer()
        if customer is not None:
            self.catalog.customers.update(customer.id, orders_count=customer.orders_count + 1)
