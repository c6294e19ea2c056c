"""Default catalog used when a collection has never been saved."""
from typing import List

from schemas import (
    AdminProfile,
    CartItem,
    Category,
    Customer,
    LibraryItem,
    MediaItem,
    Mission,
    Order,
    Product,
    SiteMedia,
    SocialSettings,
    slugify,
)
from security import get_password_hash

PRODUCT_COUNT = 1000

CATEGORIES = [
    {
        "id": "1", "name": "Professional Cinema", "icon": "🎥", "is_popular": True,
        "thumbnail": "https://images.unsplash.com/photo-1473968512647-3e44a224fe8f?q=80&w=400",
        "subcategories": ["8K Cinema", "Hollywood Grade", "Heavy Lift", "Production Ready"],
    },
    {
        "id": "2", "name": "FPV Racing & Freestyle", "icon": "⚡", "is_popular": True,
        "thumbnail": "https://images.unsplash.com/photo-1533560235473-19e31f711f14?q=80&w=400",
        "subcategories": ["Digital FPV", "6S Racers", "Cinewhoops", "Long Range FPV"],
    },
    {
        "id": "3", "name": "Consumer Photography", "icon": "📸", "is_popular": True,
        "thumbnail": "https://images.unsplash.com/photo-1507582020474-9a35b7d455d9?q=80&w=400",
        "subcategories": ["Travel Drones", "Beginner Friendly", "4K Folding", "Mini Series"],
    },
    {
        "id": "4", "name": "Industrial & Agriculture", "icon": "🏗️", "is_popular": False,
        "thumbnail": "https://images.unsplash.com/photo-1527142879024-c6c91aa6423c?q=80&w=400",
        "subcategories": ["Thermal Mapping", "Agri-Sprayer", "Surveying", "Search & Rescue"],
    },
]

DRONE_TYPES = {
    "Mini Pocket Drone": "3",
    "Extreme Battery Life Drone": "3",
    "High-Speed Racing Drone": "2",
    "Ultra-Light Foldable Travel Drone": "3",
    "Stealth Silent Flight Drone": "4",
    "Compact Urban Exploration Drone": "3",
    "Luxury Premium Design Drone": "1",
    "Long-Range GPS Survey Drone": "4",
    "Weather-Resistant Industrial Drone": "4",
    "AI-Powered Smart Tracking Drone": "4",
    "Stabilized Gimbal Camera Drone": "3",
    "Autonomous Mapping Drone": "4",
    "Professional 8K Camera Drone": "1",
    "Cinematic Aerial Photography Drone": "1",
    "Night Vision Surveillance Drone": "4",
}

FEATURES = [
    "low-latency FPV mode", "silent propeller technology", "long endurance battery",
    "precision GPS lock", "foldable portable design", "intelligent return-to-home",
    "smart subject tracking", "cinematic stabilization", "real-time HD transmission",
    "carbon fiber body", "brushless motors", "professional-grade camera module",
    "ultra-stable hovering", "AI obstacle avoidance", "wind-resistant flight system",
]

MISSIONS = [
    {"id": "1", "title": "Browse Coins Channel for 10s", "description": "Explore to find 40% off items and earn 100 coins.",
     "reward": 100, "progress": "0/10", "goal": "10/10", "icon": "💰"},
    {"id": "2", "title": "Share, Invite & Win Free Prizes", "description": "Play for 10 seconds & earn 200 Coins",
     "reward": 200, "progress": "0/1", "goal": "1/1", "icon": "🎁"},
    {"id": "3", "title": "As Low As Tk.70", "description": "Browse for 10 seconds and earn 50 Coins",
     "reward": 50, "progress": "0/1", "goal": "1/1", "icon": "🏷️"},
    {"id": "4", "title": "Turn On Notifications!", "description": "Earn 100 Coins",
     "reward": 100, "progress": "0/1", "goal": "1/1", "icon": "🔔"},
]


def default_categories() -> List[Category]:
    return [Category(**c, slug=slugify(c["name"])) for c in CATEGORIES]


def _features(i: int) -> List[str]:
    n = len(FEATURES)
    f1, f2, f3 = (i * 3) % n, (i * 7) % n, (i * 11) % n
    if f2 == f1:
        f2 = (f2 + 1) % n
    if f3 in (f1, f2):
        f3 = (f3 + 2) % n
    return [FEATURES[f1], FEATURES[f2], FEATURES[f3]]


def default_products(count: int = PRODUCT_COUNT) -> List[Product]:
    names = {c["id"]: c["name"] for c in CATEGORIES}
    types = list(DRONE_TYPES)
    products = []
    for i in range(1, count + 1):
        type_name = types[(i - 1) % len(types)]
        cat_id = DRONE_TYPES[type_name]
        features = _features(i)
        price = round((130 + (i * 17) % 350 + 50) * 120)
        discount = 5 + i % 20
        products.append(Product(
            id=f"drone-inv-1000-{i}",
            name=f"{type_name} X-{1000 + i} Series",
            category=names[cat_id],
            category_id=cat_id,
            subcategory=type_name,
            price=price,
            original_price=round(price * (1 + discount / 100)),
            discount=discount,
            image=f"https://picsum.photos/seed/drone-main-{i}/800/600",
            images=[f"https://picsum.photos/seed/drone-angle{k}-{i}/800/600" for k in (1, 2, 3)],
            description=(
                f"{type_name} featuring {features[0]}, {features[1]}, and {features[2]}. "
                f"Engineered for high-precision operations, the X-{1000 + i} pairs integrated "
                "smart safety systems with advanced telemetry."
            ),
            stock=5 + i % 95,
            rating=round(4.1 + (i * 37 % 90) / 100, 1),
            reviews=8 + i % 1200,
            status="active",
            coin_reward=round(price * 0.01),
            max_coin_deduction=round(price * 0.05),
        ))
    return products


def default_orders(products: List[Product]) -> List[Order]:
    if not products:
        return []
    return [Order(
        id="ORD-8821",
        customer_name="Md Samiul",
        customer_email="md4518199@gmail.com",
        customer_phone="01711111111",
        address="Banani, Dhaka",
        total=35000.0,
        status="Paid",
        date="2023-12-01",
        items=[CartItem(**products[0].model_dump(), quantity=1)],
    )]


def default_customers() -> List[Customer]:
    return [Customer(
        id="c1",
        name="Md Samiul",
        email="md4518199@gmail.com",
        phone="01711111111",
        password=get_password_hash("password123"),
        orders_count=1,
        date_joined="2023-01-15",
        avatar="https://images.unsplash.com/photo-1535713875002-d1d0cf377fde?q=80&w=100",
        status="active",
        coins=4500,
    )]


def default_site_media() -> SiteMedia:
    return SiteMedia(
        hero_slides=[
            MediaItem(
                id="h1",
                url="https://images.unsplash.com/photo-1508614589041-895b88991e3e?q=80&w=1470",
                title="Next-Gen Aerial Systems",
                subtitle="Experience the world from a new perspective with our professional 8K drone series.",
                cta="Explore Drones",
            ),
            MediaItem(
                id="h2",
                url="https://images.unsplash.com/photo-1473968512647-3e44a224fe8f?q=80&w=1470",
                title="FPV Racing Revolution",
                subtitle="High-speed, low-latency digital FPV systems for the ultimate competitive edge.",
                cta="Shop Racing",
            ),
            MediaItem(
                id="h3",
                url="https://images.unsplash.com/photo-1521405924368-64c5b84bec60?q=80&w=1399",
                title="Mini Drones, Maxi Power",
                subtitle="Compact, portable, and powerful. No registration required for our sub-249g models.",
                cta="Order Now",
            ),
        ],
        promo_banner=MediaItem(
            id="p1",
            url="https://images.unsplash.com/photo-1527142879024-c6c91aa6423c?q=80&w=1470",
            title="Precision Agriculture",
            subtitle="Optimize your yield with our automated crop spraying and mapping solutions.",
        ),
    )


def default_media_library() -> List[LibraryItem]:
    return [
        LibraryItem(id="lib-1", name="Cinema Drone", created_at="2023-11-20",
                    url="https://images.unsplash.com/photo-1507582020474-9a35b7d455d9?q=80&w=1470"),
        LibraryItem(id="lib-2", name="Racing Unit", created_at="2023-11-21",
                    url="https://images.unsplash.com/photo-1533560235473-19e31f711f14?q=80&w=1470"),
        LibraryItem(id="lib-3", name="Mini Drone White", created_at="2023-11-22",
                    url="https://images.unsplash.com/photo-1521405924368-64c5b84bec60?q=80&w=1399"),
    ]


def default_admin_profile() -> AdminProfile:
    return AdminProfile(
        first_name="Admin",
        last_name="DroneStore",
        address="Drone Innovation Hub, Silicon Valley",
        contact="+1 800 DRONE PRO",
        email="admin@dronestore.com",
        role="Systems Administrator",
    )


def default_social_settings() -> SocialSettings:
    return SocialSettings(
        google_enabled=True,
        google_client_id="852233669-google-id-example.apps.googleusercontent.com",
        google_client_secret="GOCSPX-secret-example-key-12345",
        facebook_enabled=True,
        facebook_app_id="154856210235485",
        facebook_app_secret="fb-secret-example-key-98765",
    )


def default_missions() -> List[Mission]:
    return [Mission(**m) for m in MISSIONS]
