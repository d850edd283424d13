"""
Hotel Service: read side of the catalogue plus the booking append.
"""

import math
import uuid
from datetime import datetime, timezone

from sqlalchemy import insert, literal, or_, select
from sqlalchemy.exc import IntegrityError

from holistay.errors import BookingAlreadyConfirmed, HotelNotFound
from holistay.extensions import db
from holistay.logger import get_logger
from holistay.models.hotel import Booking, Hotel, HotelFacility

logger = get_logger("hotels")

PAGE_SIZE = 5

SORT_OPTIONS = {
    "starRating": Hotel.star_rating.desc(),
    "pricePerNightAsc": Hotel.price_per_night.asc(),
    "pricePerNightDesc": Hotel.price_per_night.desc(),
}


def build_search_filters(query):
    filters = []

    if query.destination:
        filters.append(or_(
            Hotel.city.icontains(query.destination, autoescape=True),
            Hotel.country.icontains(query.destination, autoescape=True),
        ))
    if query.adult_count is not None:
        filters.append(Hotel.adult_count >= query.adult_count)
    if query.child_count is not None:
        filters.append(Hotel.child_count >= query.child_count)
    # Every requested facility must be present
    for facility in query.facilities:
        filters.append(Hotel.facilities.any(HotelFacility.name == facility))
    if query.types:
        filters.append(Hotel.type.in_(query.types))
    if query.stars:
        filters.append(Hotel.star_rating.in_(query.stars))
    if query.max_price is not None:
        filters.append(Hotel.price_per_night <= query.max_price)

    return filters


def search_hotels(query):
    order_by = SORT_OPTIONS.get(query.sort_option, Hotel.last_updated.desc())
    pagination = (
        Hotel.query
        .filter(*build_search_filters(query))
        .order_by(order_by, Hotel.hotel_id)
        .paginate(page=query.page, per_page=PAGE_SIZE, error_out=False)
    )
    return {
        "data": [hotel.to_dict() for hotel in pagination.items],
        "pagination": {
            "total": pagination.total,
            "page": query.page,
            "pages": math.ceil(pagination.total / PAGE_SIZE),
        },
    }


def list_hotels():
    return Hotel.query.order_by(Hotel.last_updated.desc()).all()


def parse_hotel_id(raw):
    """Path ids that are not UUIDs name no hotel."""
    try:
        return uuid.UUID(str(raw))
    except ValueError as e:
        raise HotelNotFound() from e


def find_hotel(hotel_id):
    return db.session.get(Hotel, hotel_id)


def get_hotel(hotel_id):
    hotel = find_hotel(hotel_id)
    if not hotel:
        raise HotelNotFound()
    return hotel


def append_booking(hotel_id, user_id, payment_intent_id, details, total_cost):
    """
    Append a booking in one INSERT ... SELECT keyed on the hotel row; a
    missing hotel inserts nothing. Raises HotelNotFound or
    BookingAlreadyConfirmed.
    """
    booking_id = uuid.uuid4()
    values = {
        "booking_id": literal(booking_id, db.Uuid(as_uuid=True)),
        "hotel_id": Hotel.hotel_id,
        "user_id": literal(uuid.UUID(str(user_id)), db.Uuid(as_uuid=True)),
        "payment_intent_id": literal(payment_intent_id, db.String),
        "first_name": literal(details.first_name, db.String),
        "last_name": literal(details.last_name, db.String),
        "email": literal(details.email, db.String),
        "adult_count": literal(details.adult_count, db.Integer),
        "child_count": literal(details.child_count, db.Integer),
        "check_in": literal(details.check_in, db.Date),
        "check_out": literal(details.check_out, db.Date),
        "total_cost": literal(total_cost, db.Numeric(10, 2)),
        "created_at": literal(datetime.now(timezone.utc), db.DateTime(timezone=True)),
    }
    stmt = insert(Booking.__table__).from_select(
        list(values),
        select(*values.values()).where(Hotel.hotel_id == hotel_id),
    )

    try:
        result = db.session.execute(stmt)
        if result.rowcount == 0:
            db.session.rollback()
            raise HotelNotFound()
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        if Booking.query.filter_by(payment_intent_id=payment_intent_id).first():
            raise BookingAlreadyConfirmed() from e
        # FK violation: the hotel vanished between SELECT and INSERT
        raise HotelNotFound() from e

    logger.info(f"Booking {booking_id} appended to hotel {hotel_id} for user {user_id}")
    return db.session.get(Booking, booking_id)
