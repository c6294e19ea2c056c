"""
Catalog repository

In-memory collections loaded from the snapshot store (with seed data as the
fallback) and written back whole after every mutation.
"""
import logging
import math
from datetime import datetime, timezone
from typing import Callable, List, Optional

from bson import ObjectId
from pydantic import BaseModel

import seed
from schemas import (
    AdminProfile,
    Category,
    Customer,
    LibraryItem,
    Order,
    OrderStatus,
    Product,
    SiteMedia,
    SocialSettings,
    slugify,
)

logger = logging.getLogger(__name__)


class NotFound(LookupError):
    pass


class DuplicateSlug(ValueError):
    pass


class Collection:
    """An ordered list of records keyed by ``id``, persisted under one key."""

    def __init__(self, snapshots, key: str, model, default: Callable[[], list]):
        self.snapshots = snapshots
        self.key = key
        self.model = model
        loaded = snapshots.load(key, None, List[model])
        if loaded is None:
            loaded = default()
        self.items: list = list(loaded)
        self.save()

    def __iter__(self):
        return iter(list(self.items))

    def __len__(self):
        return len(self.items)

    def all(self) -> list:
        return list(self.items)

    def save(self) -> None:
        self.snapshots.save(self.key, self.items)

    def replace(self, items) -> None:
        self.items = [self.model.model_validate(i) for i in items]
        self.save()

    def get(self, item_id: str):
        return next((i for i in self.items if i.id == item_id), None)

    def insert(self, item, first: bool = False):
        item = self.model.model_validate(item)
        if self.get(item.id) is not None:
            raise ValueError(f"{self.key}: id {item.id!r} already exists")
        if first:
            self.items.insert(0, item)
        else:
            self.items.append(item)
        self.save()
        return item

    def update(self, item_id: str, **changes):
        for idx, item in enumerate(self.items):
            if item.id == item_id:
                changes.pop("id", None)
                updated = self.model.model_validate({**item.model_dump(), **changes})
                self.items[idx] = updated
                self.save()
                return updated
        raise NotFound(f"{self.key}: {item_id}")

    def delete(self, item_id: str) -> bool:
        before = len(self.items)
        self.items = [i for i in self.items if i.id != item_id]
        if len(self.items) == before:
            return False
        self.save()
        return True


class Document:
    """A single configuration record persisted under one key."""

    def __init__(self, snapshots, key: str, model, default: Callable[[], BaseModel]):
        self.snapshots = snapshots
        self.key = key
        self.model = model
        loaded = snapshots.load(key, None, model)
        self.value = loaded if loaded is not None else default()
        self.save()

    def get(self):
        return self.value

    def save(self) -> None:
        self.snapshots.save(self.key, self.value)

    def replace(self, value) -> None:
        self.value = self.model.model_validate(value)
        self.save()

    def update(self, **changes):
        self.value = self.model.model_validate({**self.value.model_dump(), **changes})
        self.save()
        return self.value


class Catalog:
    def __init__(self, snapshots):
        self.snapshots = snapshots
        self.categories = Collection(snapshots, "db_categories", Category, seed.default_categories)
        self.products = Collection(snapshots, "db_products", Product, seed.default_products)
        self._normalize_products()
        self.orders = Collection(snapshots, "db_orders", Order, lambda: seed.default_orders(self.products.all()))
        self.customers = Collection(snapshots, "db_customers", Customer, seed.default_customers)
        self.media_library = Collection(snapshots, "db_media_library", LibraryItem, seed.default_media_library)
        self.site_media = Document(snapshots, "db_site_media", SiteMedia, seed.default_site_media)
        self.admin_profile = Document(snapshots, "db_admin_profile", AdminProfile, seed.default_admin_profile)
        self.social_settings = Document(snapshots, "db_social_settings", SocialSettings, seed.default_social_settings)

    def _normalize_products(self) -> None:
        by_name = {c.name: c.id for c in self.categories}
        normalized = []
        for p in self.products:
            changes = {}
            if not p.category_id or p.category_id == "unknown":
                changes["category_id"] = by_name.get(p.category, "unknown")
            if p.coin_reward is None:
                changes["coin_reward"] = math.floor(p.price * 0.1)
            if p.max_coin_deduction is None:
                changes["max_coin_deduction"] = math.floor(p.price * 5)
            normalized.append(p.model_copy(update=changes) if changes else p)
        self.products.replace(normalized)

    # Lookups
    def find_product(self, product_id: str) -> Optional[Product]:
        return self.products.get(product_id)

    def find_category(self, category_id: str) -> Optional[Category]:
        return self.categories.get(category_id)

    def find_category_by_slug(self, slug: str) -> Optional[Category]:
        return next((c for c in self.categories if c.slug == slug), None)

    def active_categories(self) -> List[Category]:
        return [c for c in self.categories if c.status == "active"]

    def active_products(self, category_id: Optional[str] = None) -> List[Product]:
        return [
            p for p in self.products
            if p.status == "active" and (category_id is None or p.category_id == category_id)
        ]

    def find_customer_by_email(self, email: str) -> Optional[Customer]:
        email = email.lower()
        return next((c for c in self.customers if c.email.lower() == email), None)

    def find_order(self, order_id: str) -> Optional[Order]:
        return self.orders.get(order_id)

    # Categories keep slug == slugify(name) and slugs unique
    def _check_slug(self, slug: str, exclude_id: Optional[str] = None) -> None:
        if not slug:
            raise DuplicateSlug("Category name yields an empty slug")
        clash = self.find_category_by_slug(slug)
        if clash is not None and clash.id != exclude_id:
            raise DuplicateSlug(f"Slug {slug!r} already used by category {clash.id}")

    def add_category(self, name: str, **fields) -> Category:
        slug = slugify(name)
        self._check_slug(slug)
        now = datetime.now(timezone.utc).isoformat()
        fields.pop("slug", None)
        category_id = fields.pop("id", None) or str(ObjectId())
        return self.categories.insert({
            **fields, "id": category_id, "name": name, "slug": slug, "created_at": now, "updated_at": now,
        })

    def update_category(self, category_id: str, **changes) -> Category:
        changes.pop("slug", None)
        if "name" in changes:
            changes["slug"] = slugify(changes["name"])
            self._check_slug(changes["slug"], exclude_id=category_id)
        changes["updated_at"] = datetime.now(timezone.utc).isoformat()
        return self.categories.update(category_id, **changes)

    # Orders are append-only; only the status moves afterwards
    def prepend_order(self, order: Order) -> Order:
        return self.orders.insert(order, first=True)

    def set_order_status(self, order_id: str, status: OrderStatus) -> Order:
        order = self.orders.update(order_id, status=status)
        logger.info("Order %s moved to %s", order_id, status)
        return order
