"""Amenity model — facilities attached to sites (toilets, showers, wifi...)."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from campsearch.database import Base, UUIDPrimaryKeyMixin


class Amenity(UUIDPrimaryKeyMixin, Base):
    """A named facility that a site may offer."""

    __tablename__ = "amenities"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    category: Mapped[str | None] = mapped_column(String(50), default=None)

    def __repr__(self) -> str:
        return f"<Amenity(id={self.id}, name={self.name!r})>"
