from typing import List

from schemas import CartItem, Product


class CartEngine:
    """Cart and wishlist mutations for one session.

    Adding to the cart and toggling the wishlist need a logged-in shopper;
    otherwise the session's login prompt is raised and nothing changes.
    """

    def __init__(self, session):
        self.session = session

    @property
    def cart(self) -> List[CartItem]:
        return list(self.session.cart)

    @property
    def wishlist(self) -> List[Product]:
        return list(self.session.wishlist)

    def _gate(self) -> bool:
        if not self.session.is_logged_in:
            self.session.request_login()
            return False
        return True

    def add_to_cart(self, product: Product, quantity: int = 1) -> bool:
        if not self._gate():
            return False
        if quantity < 1:
            return False
        cart = self.session.cart
        if any(item.id == product.id for item in cart):
            cart = [
                item.model_copy(update={"quantity": item.quantity + quantity}) if item.id == product.id else item
                for item in cart
            ]
        else:
            fields = product.model_dump(exclude={"quantity"})
            cart = cart + [CartItem(**fields, quantity=quantity)]
        self.session.set_cart(cart)
        return True

    def remove_from_cart(self, product_id: str) -> None:
        cart = [item for item in self.session.cart if item.id != product_id]
        if len(cart) != len(self.session.cart):
            self.session.set_cart(cart)

    def update_cart_quantity(self, product_id: str, quantity: int) -> None:
        if quantity < 1:
            return
        cart = [
            item.model_copy(update={"quantity": quantity}) if item.id == product_id else item
            for item in self.session.cart
        ]
        self.session.set_cart(cart)

    def toggle_wishlist(self, product: Product) -> bool:
        if not self._gate():
            return False
        if self.is_in_wishlist(product.id):
            wishlist = [p for p in self.session.wishlist if p.id != product.id]
        else:
            wishlist = self.session.wishlist + [Product(**product.model_dump(exclude={"quantity"}))]
        self.session.set_wishlist(wishlist)
        return True

    def is_in_wishlist(self, product_id: str) -> bool:
        return any(p.id == product_id for p in self.session.wishlist)

    def clear_cart(self) -> None:
        self.session.set_cart([])

    def subtotal(self) -> int:
        return sum(item.price * item.quantity for item in self.session.cart)

    def count(self) -> int:
        return sum(item.quantity for item in self.session.cart)
