from datetime import datetime, timedelta, timezone

import pytest

from catalog import Catalog
from coins import Clock
from database import MemoryBlobs, SnapshotStore
from schemas import Product
from store import Store


class FakeClock(Clock):
    def __init__(self, at):
        self.at = at

    def now(self):
        return self.at

    def advance(self, **kwargs):
        self.at += timedelta(**kwargs)


def make_product(product_id, price, max_coin_deduction=0, **fields):
    data = {
        "id": product_id,
        "name": f"Drone {product_id}",
        "category": "Consumer Photography",
        "category_id": "3",
        "price": price,
        "stock": 10,
        "coin_reward": 10,
        "max_coin_deduction": max_coin_deduction,
    }
    data.update(fields)
    return Product(**data)


PRODUCTS = [
    make_product("p1", 500, 25),
    make_product("p2", 1000, 50),
    make_product("p3", 15600, 780, category="Professional Cinema", category_id="1"),
    make_product("p4", 2000, 100, status="inactive"),
]


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def blobs():
    return MemoryBlobs()


@pytest.fixture
def snapshots(blobs):
    snapshots = SnapshotStore(blobs)
    snapshots.save("db_products", PRODUCTS)
    return snapshots


@pytest.fixture
def catalog(snapshots):
    return Catalog(snapshots)


@pytest.fixture
def store(catalog, snapshots, clock):
    return Store(catalog, snapshots, session_id="s1", clock=clock)


@pytest.fixture
def shopper(store):
    store.session.set_is_logged_in(True)
    return store
