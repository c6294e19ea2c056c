from typing import List

import pytest

from conftest import make_product
from orders import FREE_SHIPPING_THRESHOLD, SHIPPING_FEE, shipping_for
from schemas import Order


def place(store, coins=0):
    return store.place_order("Md Samiul", "md4518199@gmail.com", "01711111111", "Banani, Dhaka", coins)


def test_shipping_rule():
    assert FREE_SHIPPING_THRESHOLD == 1000
    assert shipping_for(500) == SHIPPING_FEE == 25
    assert shipping_for(1000) == 25
    assert shipping_for(1001) == 0


def test_small_order_pays_shipping(shopper, catalog):
    shopper.add_to_cart(catalog.find_product("p1"))
    order = place(shopper)
    assert order.total == 525
    assert order.coins_used == 0
    assert order.coin_discount == 0


def test_coins_clamped_to_cap_before_discount(shopper, catalog):
    shopper.session.set_coins(2000)
    shopper.add_to_cart(catalog.find_product("p2"), 2)
    order = place(shopper, coins=5000)
    assert order.coins_used == 100
    assert order.coin_discount == 1
    assert order.total == 1999
    assert shopper.coins.balance == 1900


def test_negative_coin_request_ignored(shopper, catalog):
    shopper.add_to_cart(catalog.find_product("p2"))
    quote = shopper.orders.quote(-50)
    assert quote.coins_used == 0
    assert quote.total == 1025


def test_total_never_negative(shopper, catalog):
    cheap = make_product("cheap", 1, max_coin_deduction=100_000)
    catalog.products.insert(cheap)
    shopper.session.set_coins(100_000)
    shopper.add_to_cart(cheap)
    quote = shopper.orders.quote(100_000)
    assert quote.coin_discount == 1000
    assert quote.total == 0
    assert place(shopper, 100_000).total == 0


def test_order_snapshot_and_side_effects(shopper, catalog, snapshots, clock):
    shopper.add_to_cart(catalog.find_product("p1"), 2)
    order = place(shopper)

    assert order.status == "Paid"
    assert order.date == "2024-03-01"
    assert order.id == f"ORD-{int(clock.now().timestamp() * 1000)}"
    assert [(i.id, i.quantity, i.price) for i in order.items] == [("p1", 2, 500)]
    assert shopper.cart.cart == []

    catalog.products.update("p1", price=900)
    assert catalog.find_order(order.id).items[0].price == 500

    saved = snapshots.load("db_orders", [], List[Order])
    assert saved[0].id == order.id
    assert saved[1].id == "ORD-8821"


def test_order_ids_are_distinct(shopper, catalog):
    shopper.add_to_cart(catalog.find_product("p1"))
    first = place(shopper)
    shopper.add_to_cart(catalog.find_product("p1"))
    second = place(shopper)
    assert first.id != second.id
    assert [o.id for o in catalog.orders][:2] == [second.id, first.id]


def test_empty_cart_is_rejected(shopper, catalog):
    before = len(catalog.orders)
    assert place(shopper) is None
    assert len(catalog.orders) == before


def test_logged_out_order_prompts_login(store, catalog):
    assert place(store) is None
    assert store.session.login_prompt_open


def test_order_counts_for_customer(store, catalog):
    store.auth.login("md4518199@gmail.com", "password123")
    store.add_to_cart(catalog.find_product("p1"))
    place(store)
    assert catalog.find_customer_by_email("md4518199@gmail.com").orders_count == 2


def test_failed_order_write_keeps_coins_and_cart(shopper, catalog, monkeypatch):
    shopper.session.set_coins(2000)
    shopper.add_to_cart(catalog.find_product("p2"))

    def refuse(order):
        raise ValueError("duplicate order id")

    monkeypatch.setattr(catalog, "prepend_order", refuse)
    with pytest.raises(ValueError):
        place(shopper, coins=50)
    assert shopper.coins.balance == 2000
    assert [i.id for i in shopper.cart.cart] == ["p2"]
