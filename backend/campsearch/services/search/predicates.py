"""Immutable property-level predicate shared by the count and page queries."""

import uuid
from dataclasses import dataclass

from sqlalchemy import ColumnElement, Select, or_, select

from campsearch.models.property import Property
from campsearch.models.user import User
from campsearch.schemas.search import SearchCriteria


@dataclass(frozen=True)
class PropertyFilter:
    """Conjunction of SQL clauses over ``properties``.

    Built once per search from the criteria and the resolved candidate ids.
    Ranking strategies apply the same instance to the total count and to the
    page query so the two can never disagree.
    """

    clauses: tuple[ColumnElement[bool], ...]

    def apply(self, stmt: Select) -> Select:
        return stmt.where(*self.clauses)

    @classmethod
    def build(cls, criteria: SearchCriteria, candidate_ids: frozenset[uuid.UUID] | None) -> "PropertyFilter":
        clauses: list[ColumnElement[bool]] = [
            Property.host_id.not_in(select(User.id).where(User.is_blocked.is_(True))),
        ]

        if candidate_ids is not None:
            clauses.append(Property.id.in_(list(candidate_ids)))

        if criteria.search:
            clauses.append(
                or_(
                    Property.name.icontains(criteria.search, autoescape=True),
                    Property.tagline.icontains(criteria.search, autoescape=True),
                    Property.description.icontains(criteria.search, autoescape=True),
                )
            )

        # City and state are loose matches, country is exact
        if criteria.city:
            clauses.append(Property.city.icontains(criteria.city, autoescape=True))
        if criteria.state:
            clauses.append(Property.state.icontains(criteria.state, autoescape=True))
        if criteria.country:
            clauses.append(Property.country == criteria.country)

        if criteria.property_type:
            clauses.append(Property.property_type.in_(criteria.property_type))

        if criteria.instant_booking is True:
            clauses.append(Property.instant_book_enabled.is_(True))

        if criteria.is_active is not None:
            clauses.append(Property.is_active.is_(criteria.is_active))
        if criteria.is_featured is not None:
            clauses.append(Property.is_featured.is_(criteria.is_featured))
        if criteria.is_verified is not None:
            clauses.append(Property.is_verified.is_(criteria.is_verified))

        if criteria.host is not None:
            clauses.append(Property.host_id == criteria.host)

        if criteria.min_rating:
            clauses.append(Property.rating_average >= criteria.min_rating)

        return cls(clauses=tuple(clauses))
