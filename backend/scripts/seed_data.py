"""Seed the database with sample campgrounds for local search testing.

Creates one demo host, a handful of guests, four properties around Da Lat
and Ha Long with a mix of tent, RV and glamping sites, shared amenities and
a few bookings so availability filtering has something to exclude.

Run inside Docker:
    docker compose exec backend python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete, select

from campsearch.database import Base, async_session_factory, engine
from campsearch.models import Amenity, Booking, Property, Site, User

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

DEMO_HOST = {
    "email": "host@campsearch.local",
    "name": "Demo Host",
    "avatar_url": "https://example.com/avatars/demo-host.png",
}

GUESTS = [
    {"email": "linh.nguyen@example.com", "name": "Linh Nguyen"},
    {"email": "minh.tran@example.com", "name": "Minh Tran"},
]

AMENITIES = [
    {"name": "toilets", "category": "basics"},
    {"name": "showers", "category": "basics"},
    {"name": "wifi", "category": "connectivity"},
    {"name": "campfire", "category": "outdoor"},
    {"name": "electricity", "category": "basics"},
]

PROPERTIES = [
    {
        "name": "Pine Hill Camp",
        "slug": "pine-hill-camp",
        "tagline": "Pine forest camping ten minutes from Da Lat",
        "property_type": "campground",
        "city": "Da Lat",
        "state": "Lam Dong",
        "country": "Vietnam",
        "latitude": 11.9404,
        "longitude": 108.4583,
        "is_featured": True,
        "is_verified": True,
        "instant_book_enabled": True,
        "rating_average": 4.8,
        "rating_count": 42,
        "total_reviews": 42,
        "cancellation_policy": {
            "type": "moderate",
            "refund_rules": [
                {"days_before_check_in": 7, "refund_percentage": 100},
                {"days_before_check_in": 2, "refund_percentage": 50},
            ],
        },
        "sites": [
            {"name": "Ridge Tent Pitch", "accommodation_type": "tent", "max_guests": 4, "max_pets": 1,
             "base_price": Decimal("250000"), "amenities": ["toilets", "campfire"]},
            {"name": "Forest Yurt", "accommodation_type": "yurt", "max_guests": 2,
             "base_price": Decimal("900000"), "minimum_nights": 2, "amenities": ["toilets", "showers", "wifi"]},
        ],
    },
    {
        "name": "Tuyen Lam Lakeside",
        "slug": "tuyen-lam-lakeside",
        "tagline": "Glamping domes on the lake shore",
        "property_type": "private_land",
        "city": "Da Lat",
        "state": "Lam Dong",
        "country": "Vietnam",
        "latitude": 11.8947,
        "longitude": 108.4271,
        "is_verified": True,
        "rating_average": 4.6,
        "rating_count": 18,
        "total_reviews": 18,
        "sites": [
            {"name": "Lake Dome", "accommodation_type": "dome", "max_guests": 3,
             "base_price": Decimal("1200000"), "amenities": ["showers", "electricity"]},
            {"name": "Safari Tent", "accommodation_type": "safari_tent", "max_guests": 4, "max_pets": 2,
             "base_price": Decimal("750000"), "maximum_nights": 5, "amenities": ["toilets"]},
        ],
    },
    {
        "name": "Bai Chay RV Park",
        "slug": "bai-chay-rv-park",
        "tagline": "Full hook-ups a short drive from Ha Long Bay",
        "property_type": "campground",
        "city": "Ha Long",
        "state": "Quang Ninh",
        "country": "Vietnam",
        "latitude": 20.9565,
        "longitude": 107.0436,
        "instant_book_enabled": True,
        "rating_average": 4.1,
        "rating_count": 9,
        "total_reviews": 9,
        "sites": [
            {"name": "RV Bay 1", "accommodation_type": "rv", "max_guests": 6, "max_pets": 2, "max_vehicles": 2,
             "base_price": Decimal("400000"), "max_concurrent_bookings": 1, "amenities": ["electricity", "toilets"]},
            {"name": "Overflow Tent Field", "accommodation_type": "tent", "max_guests": 8,
             "base_price": Decimal("150000"), "max_concurrent_bookings": 10, "amenities": ["toilets"]},
        ],
    },
    {
        "name": "Cat Ba Farmstay",
        "slug": "cat-ba-farmstay",
        "tagline": "Tiny homes on a working farm",
        "property_type": "farm",
        "city": "Cat Ba",
        "state": "Hai Phong",
        "country": "Vietnam",
        "latitude": 20.7276,
        "longitude": 107.0480,
        "rating_average": 3.9,
        "rating_count": 4,
        "total_reviews": 4,
        "sites": [
            {"name": "Tiny Home", "accommodation_type": "tiny_home", "max_guests": 2,
             "base_price": Decimal("600000"), "is_active": False, "amenities": ["wifi"]},
        ],
    },
]


def _build_bookings(sites: dict[str, Site], guests: list[User], today: date) -> list[Booking]:
    """A few bookings, including ones that must not block availability."""
    return [
        Booking(
            site_id=sites["Ridge Tent Pitch"].id,
            guest_id=guests[0].id,
            check_in=today + timedelta(days=14),
            check_out=today + timedelta(days=17),
            number_of_guests=2,
            status="confirmed",
            total_price=Decimal("750000"),
        ),
        Booking(
            site_id=sites["Lake Dome"].id,
            guest_id=guests[1].id,
            check_in=today + timedelta(days=10),
            check_out=today + timedelta(days=12),
            number_of_guests=2,
            status="pending",
            total_price=Decimal("2400000"),
        ),
        Booking(
            site_id=sites["RV Bay 1"].id,
            guest_id=guests[1].id,
            check_in=today + timedelta(days=14),
            check_out=today + timedelta(days=16),
            number_of_guests=4,
            status="cancelled",
            total_price=Decimal("800000"),
        ),
    ]


# ---------------------------------------------------------------------------
# Main seed function
# ---------------------------------------------------------------------------


async def seed() -> None:
    """Create tables if needed and (re)load the demo data set.

    Idempotent: an existing demo host is removed together with its
    properties, sites and bookings before the data is inserted again.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as session:
        result = await session.execute(select(User).where(User.email == DEMO_HOST["email"]))
        existing_host = result.scalar_one_or_none()

        if existing_host is not None:
            print(f"⚠️  Demo host '{DEMO_HOST['email']}' already exists. Deleting and re-seeding...")
            property_ids = select(Property.id).where(Property.host_id == existing_host.id)
            site_ids = select(Site.id).where(Site.property_id.in_(property_ids))
            await session.execute(delete(Booking).where(Booking.site_id.in_(site_ids)))
            await session.execute(delete(Site).where(Site.property_id.in_(property_ids)))
            await session.execute(delete(Property).where(Property.host_id == existing_host.id))
            await session.execute(delete(User).where(User.id == existing_host.id))
            await session.flush()

        await session.execute(delete(User).where(User.email.in_([g["email"] for g in GUESTS])))
        await session.execute(delete(Amenity))
        await session.flush()

        # ------------------------------------------------------------------
        # 1. Host, guests, amenities
        # ------------------------------------------------------------------
        host = User(role="host", **DEMO_HOST)
        session.add(host)
        guests = [User(role="guest", **g) for g in GUESTS]
        session.add_all(guests)
        amenities = {a["name"]: Amenity(**a) for a in AMENITIES}
        session.add_all(amenities.values())
        await session.flush()

        print(f"✅ Created demo host: {host.email} (id={host.id})")

        # ------------------------------------------------------------------
        # 2. Properties and sites
        # ------------------------------------------------------------------
        sites_by_name: dict[str, Site] = {}
        for prop_data in PROPERTIES:
            prop_data = dict(prop_data)
            site_rows = prop_data.pop("sites")
            prop = Property(host_id=host.id, **prop_data)
            session.add(prop)
            await session.flush()

            for site_data in site_rows:
                site_data = dict(site_data)
                amenity_names = site_data.pop("amenities", [])
                site = Site(property_id=prop.id, **site_data)
                site.amenities = [amenities[name] for name in amenity_names]
                session.add(site)
                sites_by_name[site.name] = site

            active = [s for s in site_rows if s.get("is_active", True)]
            prop.total_sites = len(site_rows)
            prop.active_sites = len(active)
            prop.is_active = bool(active)
            await session.flush()
            print(f"   🏕  {prop.name} — {prop.city}, {prop.state} ({len(site_rows)} sites)")

        # ------------------------------------------------------------------
        # 3. Bookings
        # ------------------------------------------------------------------
        bookings = _build_bookings(sites_by_name, guests, date.today())
        session.add_all(bookings)
        await session.flush()
        await session.commit()

        print(f"✅ Created {len(bookings)} bookings")
        print()
        print("=" * 60)
        print("📊 Seed Summary")
        print("=" * 60)
        print(f"   Hosts:      1 ({DEMO_HOST['email']})")
        print(f"   Guests:     {len(guests)}")
        print(f"   Amenities:  {len(amenities)}")
        print(f"   Properties: {len(PROPERTIES)}")
        print(f"   Sites:      {len(sites_by_name)}")
        print(f"   Bookings:   {len(bookings)}")
        print("=" * 60)
        print("🎉 Done! Try GET /api/v1/properties/search?city=Da%20Lat")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
