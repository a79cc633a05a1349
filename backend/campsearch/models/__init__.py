"""SQLAlchemy models for the campsite search service.

All models are imported here so that ``Base.metadata`` knows every table
before ``create_all`` runs. If you add a new model, import it in this file.
"""

from campsearch.models.amenity import Amenity
from campsearch.models.booking import Booking
from campsearch.models.property import Property
from campsearch.models.site import Site, site_amenities
from campsearch.models.user import User

__all__ = [
    "Amenity",
    "Booking",
    "Property",
    "Site",
    "User",
    "site_amenities",
]
