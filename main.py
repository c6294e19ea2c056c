import logging
import os
from typing import Any, Dict, List, Optional

from bson import ObjectId
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel, EmailStr, Field

from auth import AdminLoginOutcome, LoginOutcome, SignupOutcome
from catalog import Catalog, DuplicateSlug, NotFound
from coins import Clock
from database import SnapshotStore, db, default_blobs
from schemas import (
    AdminProfile,
    Currency,
    MediaType,
    OrderStatus,
    Product,
    SiteMedia,
    SocialAccount,
    SocialSettings,
    Status,
)
from security import create_access_token, decode_session_id
from store import Store

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/session")

app = FastAPI(title="Drone SuperStore API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_shared: Dict[str, Any] = {}


# Dependencies
def get_snapshots() -> SnapshotStore:
    if "snapshots" not in _shared:
        _shared["snapshots"] = SnapshotStore(default_blobs())
    return _shared["snapshots"]


def get_catalog(snapshots: SnapshotStore = Depends(get_snapshots)) -> Catalog:
    catalog = _shared.get("catalog")
    if catalog is None or catalog.snapshots is not snapshots:
        catalog = _shared["catalog"] = Catalog(snapshots)
    return catalog


def get_clock() -> Clock:
    return Clock()


def get_store(
    token: str = Depends(oauth2_scheme),
    snapshots: SnapshotStore = Depends(get_snapshots),
    catalog: Catalog = Depends(get_catalog),
    clock: Clock = Depends(get_clock),
) -> Store:
    session_id = decode_session_id(token)
    if session_id is None:
        raise HTTPException(status_code=401, detail="Could not validate session")
    return Store(catalog, snapshots, session_id=session_id, clock=clock)


def require_admin(store: Store = Depends(get_store)) -> Store:
    if not store.session.is_admin:
        raise HTTPException(status_code=403, detail="Admin session required")
    return store


def login_required():
    return HTTPException(status_code=401, detail="login_required")


# Request / response models
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    remember: bool = False


class SignupRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str
    confirm_password: str


class AdminLoginRequest(BaseModel):
    email: str
    password: str
    code: Optional[str] = None


class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = 1


class QuantityRequest(BaseModel):
    quantity: int


class CurrencyRequest(BaseModel):
    currency: Currency


class QuoteRequest(BaseModel):
    coins_to_use: int = 0


class CheckoutRequest(BaseModel):
    customer_name: str
    customer_email: EmailStr
    customer_phone: str
    address: str
    coins_to_use: int = 0


class OrderStatusRequest(BaseModel):
    status: OrderStatus


class CustomerStatusRequest(BaseModel):
    status: str = Field(..., pattern="^(active|blocked)$")


class CategoryIn(BaseModel):
    name: str = Field(..., min_length=1)
    icon: str = "📦"
    thumbnail: str = ""
    is_popular: bool = False
    status: Status = "active"
    subcategories: List[str] = []


class LibraryItemIn(BaseModel):
    name: str
    url: str
    type: MediaType = "image"


class TwoFactorEnableRequest(BaseModel):
    secret: str
    code: str


def summary(store: Store) -> dict:
    session = store.session
    return {
        "is_logged_in": session.is_logged_in,
        "is_admin": session.is_admin,
        "current_user": session.current_user,
        "remembered_email": session.remembered.email if session.remembered else None,
        "coins": session.coins,
        "currency": session.currency,
        "cart_count": store.cart.count(),
        "wishlist_count": len(session.wishlist),
    }


def cart_view(store: Store, coins_to_use: int = 0) -> dict:
    quote = store.orders.quote(coins_to_use)
    return {
        "items": store.cart.cart,
        "quote": quote,
        "display": {
            "subtotal": store.format_price(quote.subtotal),
            "shipping": "FREE" if quote.shipping == 0 else store.format_price(quote.shipping),
            "coin_discount": store.format_price(quote.coin_discount),
            "total": store.format_price(quote.total),
        },
    }


def find_product_or_404(catalog: Catalog, product_id: str) -> Product:
    product = catalog.find_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


# Health
@app.get("/")
def read_root():
    return {"message": "Drone SuperStore backend is running"}


@app.get("/test")
def test_database(snapshots: SnapshotStore = Depends(get_snapshots)):
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set",
        "snapshot_backend": type(snapshots.blobs).__name__,
        "collections": [],
    }
    try:
        if db is not None:
            response["database"] = "✅ Available"
            try:
                response["collections"] = db.list_collection_names()[:10]
                response["database"] = "✅ Connected & Working"
            except Exception as e:
                response["database"] = f"⚠️ Connected but Error: {str(e)[:50]}"
        else:
            response["database"] = "⚠️ In-memory snapshots"
    except Exception as e:
        response["database"] = f"❌ Error: {str(e)[:50]}"
    return response


# Session / auth
@app.post("/api/session", response_model=Token)
def open_session():
    return Token(access_token=create_access_token({"sub": str(ObjectId())}))


@app.get("/api/me")
def me(store: Store = Depends(get_store)):
    return summary(store)


@app.post("/api/login")
def login(payload: LoginRequest, store: Store = Depends(get_store)):
    outcome = store.auth.login(payload.email, payload.password, payload.remember)
    if outcome is not LoginOutcome.OK:
        raise HTTPException(status_code=401, detail=outcome.value)
    return summary(store)


@app.post("/api/register")
def register(payload: SignupRequest, store: Store = Depends(get_store)):
    outcome = store.auth.signup(payload.name, payload.email, payload.password, payload.confirm_password)
    if outcome is not SignupOutcome.OK:
        raise HTTPException(status_code=400, detail=outcome.value)
    return summary(store)


@app.post("/api/login/social")
def social_login(account: SocialAccount, store: Store = Depends(get_store)):
    outcome = store.auth.social_login(account)
    if outcome is not LoginOutcome.OK:
        raise HTTPException(status_code=401, detail=outcome.value)
    return summary(store)


@app.post("/api/logout")
def logout(store: Store = Depends(get_store)):
    store.auth.logout()
    return summary(store)


@app.get("/api/social-providers")
def social_providers(catalog: Catalog = Depends(get_catalog)):
    settings = catalog.social_settings.get()
    return {"google": settings.google_enabled, "facebook": settings.facebook_enabled}


# Catalog
@app.get("/api/categories")
def list_categories(catalog: Catalog = Depends(get_catalog)):
    return catalog.active_categories()


@app.get("/api/categories/{slug}")
def get_category(slug: str, page: int = 1, limit: int = 12, catalog: Catalog = Depends(get_catalog)):
    category = catalog.find_category_by_slug(slug)
    if category is None or category.status != "active":
        raise HTTPException(status_code=404, detail="Category not found")
    products = catalog.active_products(category.id)
    start = (page - 1) * limit
    return {"category": category, "items": products[start:start + limit], "total": len(products)}


@app.get("/api/products")
def list_products(
    q: Optional[str] = None,
    category: Optional[str] = None,
    min_price: Optional[int] = Query(None, ge=0),
    max_price: Optional[int] = Query(None, ge=0),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    sort: Optional[str] = Query(None, description="price_asc|price_desc|rating_desc"),
    catalog: Catalog = Depends(get_catalog),
):
    items = catalog.active_products()
    if q:
        needle = q.lower()
        items = [p for p in items if needle in p.name.lower() or needle in p.description.lower()]
    if category:
        items = [p for p in items if category in (p.category_id, p.category)]
    if min_price is not None:
        items = [p for p in items if p.price >= min_price]
    if max_price is not None:
        items = [p for p in items if p.price <= max_price]

    if sort == "price_asc":
        items.sort(key=lambda p: p.price)
    elif sort == "price_desc":
        items.sort(key=lambda p: p.price, reverse=True)
    elif sort == "rating_desc":
        items.sort(key=lambda p: p.rating, reverse=True)

    start = (page - 1) * limit
    return {"items": items[start:start + limit], "page": page, "limit": limit, "total": len(items)}


@app.get("/api/products/{product_id}")
def get_product(product_id: str, catalog: Catalog = Depends(get_catalog)):
    product = find_product_or_404(catalog, product_id)
    related = [p for p in catalog.active_products(product.category_id) if p.id != product.id][:8]
    return {"product": product, "related": related}


@app.get("/api/site-media", response_model=SiteMedia)
def site_media(catalog: Catalog = Depends(get_catalog)):
    return catalog.site_media.get()


# Currency
@app.put("/api/currency")
def set_currency(payload: CurrencyRequest, store: Store = Depends(get_store)):
    store.currency.set_currency(payload.currency)
    return {"currency": store.currency.currency}


@app.get("/api/price")
def format_price(amount: float, currency: Optional[Currency] = None, store: Store = Depends(get_store)):
    return {"amount": amount, "formatted": store.currency.format(amount, currency)}


# Cart / wishlist
@app.get("/api/cart")
def get_cart(coins_to_use: int = 0, store: Store = Depends(get_store)):
    return cart_view(store, coins_to_use)


@app.post("/api/cart")
def add_to_cart(payload: AddToCartRequest, store: Store = Depends(get_store)):
    product = find_product_or_404(store.catalog, payload.product_id)
    if payload.quantity < 1:
        raise HTTPException(status_code=400, detail="Quantity must be at least 1")
    if not store.add_to_cart(product, payload.quantity):
        raise login_required()
    return cart_view(store)


@app.patch("/api/cart/{product_id}")
def update_cart_item(product_id: str, payload: QuantityRequest, store: Store = Depends(get_store)):
    store.cart.update_cart_quantity(product_id, payload.quantity)
    return cart_view(store)


@app.delete("/api/cart/{product_id}")
def remove_cart_item(product_id: str, store: Store = Depends(get_store)):
    store.cart.remove_from_cart(product_id)
    return cart_view(store)


@app.get("/api/wishlist")
def get_wishlist(store: Store = Depends(get_store)):
    return store.cart.wishlist


@app.post("/api/wishlist/{product_id}")
def toggle_wishlist(product_id: str, store: Store = Depends(get_store)):
    product = find_product_or_404(store.catalog, product_id)
    if not store.toggle_wishlist(product):
        raise login_required()
    return {"product_id": product_id, "in_wishlist": store.cart.is_in_wishlist(product_id)}


# Coins
@app.get("/api/coins")
def coins(store: Store = Depends(get_store)):
    return {
        "balance": store.coins.balance,
        "redemption_cap": store.coins.redemption_cap(),
        "usable": store.coins.usable_coins(),
        "check_in": store.coins.check_in_status(),
        "missions": store.coins.missions,
    }


@app.post("/api/coins/check-in")
def check_in(store: Store = Depends(get_store)):
    if not store.session.is_logged_in:
        raise login_required()
    if not store.coins.claim_check_in():
        raise HTTPException(status_code=409, detail=store.coins.check_in_status().model_dump(mode="json"))
    return {"balance": store.coins.balance, "check_in": store.coins.check_in_status()}


@app.post("/api/coins/missions/{mission_id}")
def complete_mission(mission_id: str, store: Store = Depends(get_store)):
    granted = store.coins.complete_mission(mission_id)
    return {"granted": granted, "balance": store.coins.balance, "missions": store.coins.missions}


@app.post("/api/coins/collect/{product_id}")
def collect_product_coins(product_id: str, store: Store = Depends(get_store)):
    if not store.session.is_logged_in:
        raise login_required()
    collected = store.coins.collect_product_reward(product_id)
    return {"collected": collected, "balance": store.coins.balance}


# Checkout / orders
@app.post("/api/checkout/quote")
def checkout_quote(payload: QuoteRequest, store: Store = Depends(get_store)):
    return cart_view(store, payload.coins_to_use)


@app.post("/api/orders")
def create_order(payload: CheckoutRequest, store: Store = Depends(get_store)):
    if not store.session.is_logged_in:
        raise login_required()
    if not store.session.cart:
        raise HTTPException(status_code=400, detail="Cart is empty")
    order = store.place_order(
        payload.customer_name, payload.customer_email, payload.customer_phone, payload.address, payload.coins_to_use
    )
    return {"order": order, "balance": store.coins.balance, "total": store.format_price(order.total)}


@app.get("/api/orders")
def my_orders(store: Store = Depends(get_store)):
    user = store.session.current_user
    if not store.session.is_logged_in or user is None:
        raise login_required()
    # a social login does not prove ownership of a password account's email
    if user.provider is not None and store.catalog.find_customer_by_email(user.email) is not None:
        return []
    return [o for o in store.catalog.orders if o.customer_email.lower() == user.email.lower()]


# Admin
@app.post("/api/admin/login")
def admin_login(payload: AdminLoginRequest, store: Store = Depends(get_store)):
    outcome = store.auth.admin_login(payload.email, payload.password, payload.code, at=store.clock.now())
    if outcome is not AdminLoginOutcome.OK:
        raise HTTPException(status_code=401, detail=outcome.value)
    return summary(store)


@app.post("/api/admin/logout")
def admin_logout(store: Store = Depends(get_store)):
    store.auth.admin_logout()
    return summary(store)


@app.get("/api/admin/orders")
def admin_orders(status: Optional[OrderStatus] = None, store: Store = Depends(require_admin)):
    return [o for o in store.catalog.orders if status is None or o.status == status]


@app.patch("/api/admin/orders/{order_id}")
def admin_update_order(order_id: str, payload: OrderStatusRequest, store: Store = Depends(require_admin)):
    try:
        return store.catalog.set_order_status(order_id, payload.status)
    except NotFound:
        raise HTTPException(status_code=404, detail="Order not found")


@app.post("/api/admin/products")
def admin_create_product(product: Product, store: Store = Depends(require_admin)):
    try:
        return store.catalog.products.insert(product)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.patch("/api/admin/products/{product_id}")
def admin_update_product(product_id: str, payload: Dict[str, Any], store: Store = Depends(require_admin)):
    try:
        return store.catalog.products.update(product_id, **payload)
    except NotFound:
        raise HTTPException(status_code=404, detail="Product not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.delete("/api/admin/products/{product_id}")
def admin_delete_product(product_id: str, store: Store = Depends(require_admin)):
    if not store.catalog.products.delete(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return {"deleted": True}


@app.post("/api/admin/categories")
def admin_create_category(payload: CategoryIn, store: Store = Depends(require_admin)):
    try:
        return store.catalog.add_category(**payload.model_dump())
    except DuplicateSlug as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.patch("/api/admin/categories/{category_id}")
def admin_update_category(category_id: str, payload: Dict[str, Any], store: Store = Depends(require_admin)):
    try:
        return store.catalog.update_category(category_id, **payload)
    except NotFound:
        raise HTTPException(status_code=404, detail="Category not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.delete("/api/admin/categories/{category_id}")
def admin_delete_category(category_id: str, store: Store = Depends(require_admin)):
    if not store.catalog.categories.delete(category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    return {"deleted": True}


@app.get("/api/admin/customers")
def admin_customers(store: Store = Depends(require_admin)):
    return [c.model_dump(exclude={"password"}) for c in store.catalog.customers]


@app.patch("/api/admin/customers/{customer_id}")
def admin_update_customer(customer_id: str, payload: CustomerStatusRequest, store: Store = Depends(require_admin)):
    try:
        customer = store.catalog.customers.update(customer_id, status=payload.status)
    except NotFound:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer.model_dump(exclude={"password"})


@app.delete("/api/admin/customers/{customer_id}")
def admin_delete_customer(customer_id: str, store: Store = Depends(require_admin)):
    if not store.catalog.customers.delete(customer_id):
        raise HTTPException(status_code=404, detail="Customer not found")
    return {"deleted": True}


@app.put("/api/admin/site-media", response_model=SiteMedia)
def admin_site_media(payload: SiteMedia, store: Store = Depends(require_admin)):
    store.catalog.site_media.replace(payload)
    return store.catalog.site_media.get()


@app.get("/api/admin/media-library")
def admin_media_library(store: Store = Depends(require_admin)):
    return store.catalog.media_library.all()


@app.post("/api/admin/media-library")
def admin_add_library_item(payload: LibraryItemIn, store: Store = Depends(require_admin)):
    return store.catalog.media_library.insert(
        {**payload.model_dump(), "id": f"lib-{ObjectId()}", "created_at": store.clock.now().date().isoformat()},
        first=True,
    )


@app.delete("/api/admin/media-library/{item_id}")
def admin_delete_library_item(item_id: str, store: Store = Depends(require_admin)):
    if not store.catalog.media_library.delete(item_id):
        raise HTTPException(status_code=404, detail="Media not found")
    return {"deleted": True}


@app.put("/api/admin/social-settings", response_model=SocialSettings)
def admin_social_settings(payload: SocialSettings, store: Store = Depends(require_admin)):
    store.catalog.social_settings.replace(payload)
    return store.catalog.social_settings.get()


@app.get("/api/admin/profile")
def admin_profile(store: Store = Depends(require_admin)):
    return store.catalog.admin_profile.get().model_dump(exclude={"two_factor_secret"})


@app.put("/api/admin/profile")
def admin_update_profile(payload: AdminProfile, store: Store = Depends(require_admin)):
    current = store.catalog.admin_profile.get()
    # 2FA state only moves through the 2fa routes
    store.catalog.admin_profile.replace(payload.model_copy(update={
        "two_factor_enabled": current.two_factor_enabled,
        "two_factor_secret": current.two_factor_secret,
    }))
    return store.catalog.admin_profile.get().model_dump(exclude={"two_factor_secret"})


@app.post("/api/admin/2fa/secret")
def admin_2fa_secret(store: Store = Depends(require_admin)):
    return store.two_factor.new_secret()


@app.post("/api/admin/2fa/enable")
def admin_2fa_enable(payload: TwoFactorEnableRequest, store: Store = Depends(require_admin)):
    if not store.two_factor.enable(payload.secret, payload.code, at=store.clock.now()):
        raise HTTPException(status_code=400, detail="Invalid verification code")
    return {"two_factor_enabled": True}


@app.post("/api/admin/2fa/disable")
def admin_2fa_disable(store: Store = Depends(require_admin)):
    store.two_factor.disable()
    return {"two_factor_enabled": False}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
