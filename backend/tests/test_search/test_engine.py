"""End-to-end tests for search_properties against a real session."""

from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from campsearch.schemas.search import SearchCriteria
from campsearch.services.search import search_properties
from campsearch.services.search.ranking import DistanceRanking, MinPriceRanking, StoredFieldRanking, select_ranking

pytestmark = pytest.mark.asyncio

HO_CHI_MINH = (10.7769, 106.7009)
BIEN_HOA = (10.9574, 106.8427)  # ~25km from Ho Chi Minh City
THU_DUC = (10.8494, 106.7537)  # ~10km from Ho Chi Minh City


def _ids(response) -> list:
    return [item.id for item in response.properties]


class TestSelectRanking:
    async def test_default_is_popular(self):
        ranking = select_ranking(SearchCriteria())
        assert isinstance(ranking, StoredFieldRanking)
        assert ranking.name == "popular"

    async def test_min_price(self):
        assert isinstance(select_ranking(SearchCriteria(sort_by="minPrice-desc")), MinPriceRanking)
        assert select_ranking(SearchCriteria(sort_by="minPrice-desc")).descending is True

    async def test_nearest_needs_geo(self):
        ranking = select_ranking(SearchCriteria(sort_by="nearestFirst"))
        assert isinstance(ranking, StoredFieldRanking)
        assert ranking.order_by == ()

        ranking = select_ranking(SearchCriteria(sort_by="nearestFirst", lat=10.0, lng=106.0, radius=5))
        assert isinstance(ranking, DistanceRanking)

    async def test_geo_with_field_sort_keeps_field_order(self):
        ranking = select_ranking(SearchCriteria(sort_by="name", lat=10.0, lng=106.0, radius=5))
        assert isinstance(ranking, StoredFieldRanking)
        assert ranking.name == "name"


class TestDates:
    async def test_invalid_range_returns_empty_page(self, db_session: AsyncSession, factory):
        prop = await factory.property()
        await factory.site(prop)

        for check_out in (date(2024, 7, 5), date(2024, 7, 4)):
            criteria = SearchCriteria(check_in=date(2024, 7, 5), check_out=check_out)
            response = await search_properties(db_session, criteria)
            assert response.properties == []
            assert response.pagination.total == 0
            assert response.pagination.pages == 0

    async def test_booking_boundaries(self, db_session: AsyncSession, factory):
        prop = await factory.property()
        site = await factory.site(prop, max_guests=4, minimum_nights=2)
        await factory.booking(site, date(2024, 7, 1), date(2024, 7, 5))

        after = await search_properties(
            db_session, SearchCriteria(check_in=date(2024, 7, 5), check_out=date(2024, 7, 7), guests=2)
        )
        assert _ids(after) == [prop.id]

        overlapping = await search_properties(
            db_session, SearchCriteria(check_in=date(2024, 7, 3), check_out=date(2024, 7, 6), guests=2)
        )
        assert overlapping.properties == []
        assert overlapping.pagination.total == 0


class TestFilters:
    async def test_blocked_host_excluded(self, db_session: AsyncSession, factory):
        blocked = await factory.user(is_blocked=True)
        hidden = await factory.property(host=blocked)
        visible = await factory.property()

        response = await search_properties(db_session, SearchCriteria())
        assert hidden.id not in _ids(response)
        assert visible.id in _ids(response)

    async def test_text_and_location(self, db_session: AsyncSession, factory):
        lake = await factory.property(name="Tuyen Lam Lakeside", city="Da Lat", country="Vietnam")
        await factory.property(name="Pine Hill", city="Da Lat", country="Vietnam")
        await factory.property(name="Lake Toba Camp", city="Samosir", country="Indonesia")

        response = await search_properties(db_session, SearchCriteria(search="lake", city="da lat"))
        assert _ids(response) == [lake.id]

        response = await search_properties(db_session, SearchCriteria(country="vietnam"))
        assert response.properties == []

    async def test_search_matches_description(self, db_session: AsyncSession, factory):
        prop = await factory.property(name="Plain Name", description="Waterfall views from every pitch")
        response = await search_properties(db_session, SearchCriteria(search="WATERFALL"))
        assert _ids(response) == [prop.id]

    async def test_like_wildcards_are_literal(self, db_session: AsyncSession, factory):
        await factory.property(name="Anything")
        response = await search_properties(db_session, SearchCriteria(search="%"))
        assert response.properties == []

    async def test_instant_booking_filter(self, db_session: AsyncSession, factory):
        instant = await factory.property(instant_book_enabled=True)
        await factory.property(instant_book_enabled=False)

        response = await search_properties(db_session, SearchCriteria(instant_booking=True))
        assert _ids(response) == [instant.id]

        response = await search_properties(db_session, SearchCriteria(instant_booking=False))
        assert response.pagination.total == 2

    async def test_status_flags(self, db_session: AsyncSession, factory):
        featured = await factory.property(is_featured=True, is_verified=True)
        inactive = await factory.property(is_active=False)

        response = await search_properties(db_session, SearchCriteria(is_featured=True, is_verified=True))
        assert _ids(response) == [featured.id]

        response = await search_properties(db_session, SearchCriteria(is_active=False))
        assert _ids(response) == [inactive.id]

    async def test_min_rating_and_type(self, db_session: AsyncSession, factory):
        farm = await factory.property(property_type="farm", rating_average=4.5)
        await factory.property(property_type="farm", rating_average=3.0)
        await factory.property(property_type="campground", rating_average=5.0)

        response = await search_properties(db_session, SearchCriteria(property_type=["farm"], min_rating=4))
        assert _ids(response) == [farm.id]

    async def test_host_filter(self, db_session: AsyncSession, factory):
        host = await factory.user()
        mine = await factory.property(host=host)
        await factory.property()

        response = await search_properties(db_session, SearchCriteria(host=host.id))
        assert _ids(response) == [mine.id]

    async def test_capacity_without_dates(self, db_session: AsyncSession, factory):
        roomy = await factory.property()
        await factory.site(roomy, max_guests=8)
        small = await factory.property()
        await factory.site(small, max_guests=2)

        response = await search_properties(db_session, SearchCriteria(guests=6))
        assert _ids(response) == [roomy.id]

    async def test_style_and_amenities_intersect(self, db_session: AsyncSession, factory):
        wifi = await factory.amenity("wifi")
        both = await factory.property()
        await factory.site(both, accommodation_type="cabin", amenities=[wifi])
        style_only = await factory.property()
        await factory.site(style_only, accommodation_type="cabin")
        amenity_only = await factory.property()
        await factory.site(amenity_only, accommodation_type="tent", amenities=[wifi])

        criteria = SearchCriteria(camping_style=["glamping"], amenities=[str(wifi.id)])
        response = await search_properties(db_session, criteria)
        assert _ids(response) == [both.id]

    async def test_unknown_amenity_gives_empty_page(self, db_session: AsyncSession, factory):
        await factory.site(await factory.property())
        response = await search_properties(db_session, SearchCriteria(amenities=["nope"]))
        assert response.properties == []
        assert response.pagination.total == 0


class TestGeo:
    async def test_radius_with_name_sort(self, db_session: AsyncSession, factory):
        near_b = await factory.property(name="B Camp", latitude=THU_DUC[0], longitude=THU_DUC[1])
        near_a = await factory.property(name="A Camp", latitude=BIEN_HOA[0], longitude=BIEN_HOA[1])
        await factory.property(name="Far Camp", latitude=11.94, longitude=108.45)

        criteria = SearchCriteria(lat=HO_CHI_MINH[0], lng=HO_CHI_MINH[1], radius=50, sort_by="name")
        response = await search_properties(db_session, criteria)
        assert _ids(response) == [near_a.id, near_b.id]
        assert all(item.distance_km is None for item in response.properties)

    async def test_nearest_first(self, db_session: AsyncSession, factory):
        farther = await factory.property(latitude=BIEN_HOA[0], longitude=BIEN_HOA[1])
        nearer = await factory.property(latitude=THU_DUC[0], longitude=THU_DUC[1])
        await factory.property(latitude=11.94, longitude=108.45)

        criteria = SearchCriteria(lat=HO_CHI_MINH[0], lng=HO_CHI_MINH[1], radius=50)
        response = await search_properties(db_session, criteria)
        assert _ids(response) == [nearer.id, farther.id]
        distances = [item.distance_km for item in response.properties]
        assert distances[0] < distances[1] < 50

    async def test_radius_excludes_outside(self, db_session: AsyncSession, factory):
        await factory.property(latitude=BIEN_HOA[0], longitude=BIEN_HOA[1])
        inside = await factory.property(latitude=THU_DUC[0], longitude=THU_DUC[1])

        criteria = SearchCriteria(lat=HO_CHI_MINH[0], lng=HO_CHI_MINH[1], radius=15, sort_by="newest")
        response = await search_properties(db_session, criteria)
        assert _ids(response) == [inside.id]

    async def test_zero_radius_disables_geo(self, db_session: AsyncSession, factory):
        await factory.property(latitude=BIEN_HOA[0], longitude=BIEN_HOA[1])
        criteria = SearchCriteria(lat=HO_CHI_MINH[0], lng=HO_CHI_MINH[1], radius=0)
        response = await search_properties(db_session, criteria)
        assert response.pagination.total == 1


class TestRanking:
    async def test_min_price_ignores_inactive_sites(self, db_session: AsyncSession, factory):
        cheap = await factory.property()
        await factory.site(cheap, base_price=Decimal("50.00"))
        pricey = await factory.property()
        await factory.site(pricey, base_price=Decimal("100.00"))
        await factory.site(pricey, base_price=Decimal("10.00"), is_active=False)

        response = await search_properties(db_session, SearchCriteria(sort_by="minPrice-asc"))
        assert _ids(response) == [cheap.id, pricey.id]
        assert [item.min_price for item in response.properties] == [Decimal("50.00"), Decimal("100.00")]

    async def test_no_active_sites_sort_last_both_ways(self, db_session: AsyncSession, factory):
        bare = await factory.property()
        cheap = await factory.property()
        await factory.site(cheap, base_price=Decimal("50.00"))
        pricey = await factory.property()
        await factory.site(pricey, base_price=Decimal("100.00"))

        ascending = await search_properties(db_session, SearchCriteria(sort_by="minPrice-asc"))
        assert _ids(ascending) == [cheap.id, pricey.id, bare.id]
        assert ascending.properties[-1].min_price is None

        descending = await search_properties(db_session, SearchCriteria(sort_by="minPrice-desc"))
        assert _ids(descending) == [pricey.id, cheap.id, bare.id]

    async def test_stored_field_sorts(self, db_session: AsyncSession, factory):
        old = await factory.property(
            name="Zeta", created_at=datetime(2023, 1, 1), rating_average=4.9, total_reviews=3, total_sites=1
        )
        new = await factory.property(
            name="Alpha", created_at=datetime(2024, 6, 1), rating_average=4.1, total_reviews=30, total_sites=5
        )

        expectations = {
            "newest": [new.id, old.id],
            "oldest": [old.id, new.id],
            "rating": [old.id, new.id],
            "reviewCount": [new.id, old.id],
            "name": [new.id, old.id],
            "totalSites": [new.id, old.id],
        }
        for sort_by, expected in expectations.items():
            response = await search_properties(db_session, SearchCriteria(sort_by=sort_by))
            assert _ids(response) == expected, sort_by

        # no sort key falls back to most reviewed
        assert _ids(await search_properties(db_session, SearchCriteria())) == [new.id, old.id]

    async def test_display_price_is_min_of_active_sites(self, db_session: AsyncSession, factory):
        prop = await factory.property()
        await factory.site(prop, base_price=Decimal("80.00"))
        await factory.site(prop, base_price=Decimal("60.00"))

        response = await search_properties(db_session, SearchCriteria(sort_by="name"))
        assert response.properties[0].min_price == Decimal("60.00")


class TestPagination:
    async def test_pages_cover_filtered_set(self, db_session: AsyncSession, factory):
        for i in range(5):
            await factory.property(name=f"Camp {i}")

        seen = []
        for page in (1, 2, 3):
            response = await search_properties(db_session, SearchCriteria(sort_by="name", page=page, limit=2))
            assert response.pagination.total == 5
            assert response.pagination.pages == 3
            seen.extend(item.name for item in response.properties)
        assert seen == [f"Camp {i}" for i in range(5)]

    async def test_page_past_end_is_empty(self, db_session: AsyncSession, factory):
        await factory.property()
        for sort_by in ("name", "minPrice-asc"):
            response = await search_properties(db_session, SearchCriteria(sort_by=sort_by, page=3, limit=1))
            assert response.properties == []
            assert response.pagination.total == 1

    async def test_min_price_total_matches_filter(self, db_session: AsyncSession, factory):
        for price in ("30.00", "20.00", "10.00"):
            prop = await factory.property(city="Da Lat")
            await factory.site(prop, base_price=Decimal(price))
            await factory.site(prop, base_price=Decimal("99.00"))
        await factory.property(city="Hue")

        response = await search_properties(
            db_session, SearchCriteria(city="Da Lat", sort_by="minPrice-asc", page=1, limit=2)
        )
        assert response.pagination.total == 3
        assert [item.min_price for item in response.properties] == [Decimal("10.00"), Decimal("20.00")]

    async def test_host_summary_has_no_email(self, db_session: AsyncSession, factory):
        host = await factory.user(name="Lan")
        await factory.property(host=host)

        response = await search_properties(db_session, SearchCriteria())
        item = response.properties[0]
        assert item.host.name == "Lan"
        assert "email" not in item.host.model_dump()
