"""
Database Schemas for the Drone SuperStore

Each Pydantic model is one record shape stored in the snapshot store.
Collections are persisted as JSON lists under their own key (see catalog.py),
single documents (site media, admin profile, social settings) as one object.
"""
import re
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field

Currency = Literal["BDT", "USD"]
Status = Literal["active", "inactive"]
MediaType = Literal["image", "video"]
OrderStatus = Literal["Pending", "Processing", "Shipped", "Delivered", "Cancelled", "Paid"]
Provider = Literal["Google", "Facebook"]


def slugify(name: str) -> str:
    """Lowercase, whitespace runs to hyphens, anything else non-word dropped."""
    slug = re.sub(r"\s+", "-", name.strip().lower())
    return re.sub(r"[^\w-]+", "", slug)


# -----------------------------
# Catalog
# -----------------------------
class Category(BaseModel):
    id: str
    name: str = Field(..., min_length=1)
    slug: str = Field(..., description="URL-safe identifier derived from name")
    icon: str = "📦"
    thumbnail: str = ""
    is_popular: bool = False
    status: Status = "active"
    subcategories: List[str] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class Product(BaseModel):
    id: str
    name: str
    category: str = Field(..., description="Category name")
    category_id: str = "unknown"
    subcategory: Optional[str] = None
    price: int = Field(..., ge=0, description="Price in BDT")
    original_price: Optional[int] = Field(None, ge=0)
    image: str = ""
    images: List[str] = Field(default_factory=list)
    description: str = ""
    stock: int = Field(0, ge=0)
    rating: float = Field(0.0, ge=0, le=5)
    reviews: int = 0
    discount: Optional[int] = Field(None, ge=0, le=100)
    status: Status = "active"
    coin_reward: Optional[int] = Field(None, ge=0, description="Coins earned by buying one unit")
    max_coin_deduction: Optional[int] = Field(None, ge=0, description="Coins redeemable per unit")


class CartItem(Product):
    quantity: int = Field(1, ge=1)


# -----------------------------
# Orders / Customers
# -----------------------------
class Order(BaseModel):
    id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    address: str
    total: float = Field(..., ge=0)
    status: OrderStatus = "Pending"
    date: str = Field(..., description="ISO date, YYYY-MM-DD")
    items: List[CartItem] = Field(default_factory=list)
    coins_used: int = Field(0, ge=0)
    coin_discount: float = Field(0.0, ge=0)

    model_config = {"frozen": True}


class Customer(BaseModel):
    id: str
    name: str
    email: EmailStr
    phone: str = ""
    password: Optional[str] = Field(None, description="Password hash (internal)")
    orders_count: int = Field(0, ge=0)
    date_joined: str
    avatar: str = ""
    status: Literal["active", "blocked"] = "active"
    coins: int = Field(0, ge=0)


# -----------------------------
# Site media / settings
# -----------------------------
class MediaItem(BaseModel):
    id: str
    type: MediaType = "image"
    url: str
    title: Optional[str] = None
    subtitle: Optional[str] = None
    cta: Optional[str] = None
    link: Optional[str] = None


class SiteMedia(BaseModel):
    hero_slides: List[MediaItem] = Field(default_factory=list)
    promo_banner: MediaItem


class LibraryItem(BaseModel):
    id: str
    name: str
    url: str
    type: MediaType = "image"
    created_at: str


class AdminProfile(BaseModel):
    first_name: str
    last_name: str
    address: str = ""
    contact: str = ""
    email: EmailStr
    role: str = "Administrator"
    two_factor_enabled: bool = False
    two_factor_secret: Optional[str] = None


class SocialSettings(BaseModel):
    google_enabled: bool = False
    google_client_id: str = ""
    google_client_secret: str = ""
    facebook_enabled: bool = False
    facebook_app_id: str = ""
    facebook_app_secret: str = ""


# -----------------------------
# Session
# -----------------------------
class SocialAccount(BaseModel):
    """Normalized account handed back by a social identity provider."""
    provider: Provider
    name: str = Field(..., min_length=1)
    email: EmailStr
    avatar: Optional[str] = None


class CurrentUser(BaseModel):
    name: str
    email: str
    provider: Optional[Provider] = None


class RememberedLogin(BaseModel):
    email: str


class Mission(BaseModel):
    id: str
    title: str
    description: str
    reward: int = Field(..., ge=0)
    progress: str
    goal: str
    icon: str = ""
    is_completed: bool = False
