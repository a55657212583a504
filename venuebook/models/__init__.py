# Import all models so that SQLAlchemy registers them for metadata.create_all
from venuebook.models.package import Package
from venuebook.models.booking import Booking
from venuebook.models.event import Event
from venuebook.models.booking_action import BookingAction

__all__ = [
    "Package",
    "Booking",
    "Event",
    "BookingAction",
]
