"""
Hotel inventory and its append-only booking collection.
"""

import uuid
from datetime import datetime, timezone
from holistay.extensions import db


class Hotel(db.Model):
    __tablename__ = "hotels"

    hotel_id = db.Column(db.Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = db.Column(db.Uuid(as_uuid=True), nullable=True)  # owner
    name = db.Column(db.String(255), nullable=False)
    city = db.Column(db.String(100), nullable=False)
    country = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    type = db.Column(db.String(50), nullable=False)
    adult_count = db.Column(db.Integer, nullable=False)
    child_count = db.Column(db.Integer, nullable=False, default=0)
    price_per_night = db.Column(db.Numeric(10, 2), nullable=False)
    star_rating = db.Column(db.Integer, nullable=False)
    image_urls = db.Column(db.JSON, nullable=False, default=list)
    last_updated = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    facilities = db.relationship(
        "HotelFacility", backref="hotel", lazy="selectin", cascade="all, delete-orphan"
    )
    bookings = db.relationship("Booking", backref="hotel", lazy="dynamic")

    def to_dict(self):
        return {
            "hotel_id":        str(self.hotel_id),
            "name":            self.name,
            "city":            self.city,
            "country":         self.country,
            "description":     self.description,
            "type":            self.type,
            "adult_count":     self.adult_count,
            "child_count":     self.child_count,
            "facilities":      sorted(f.name for f in self.facilities),
            "price_per_night": float(self.price_per_night),
            "star_rating":     self.star_rating,
            "image_urls":      list(self.image_urls or []),
            "last_updated":    self.last_updated.isoformat() if self.last_updated else None,
        }


class HotelFacility(db.Model):
    __tablename__ = "hotel_facilities"

    hotel_id = db.Column(db.Uuid(as_uuid=True), db.ForeignKey("hotels.hotel_id"), primary_key=True)
    name = db.Column(db.String(100), primary_key=True)


class Booking(db.Model):
    """
    Written only by a reconciled payment; never updated or deleted.
    """
    __tablename__ = "bookings"

    booking_id = db.Column(db.Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    hotel_id = db.Column(db.Uuid(as_uuid=True), db.ForeignKey("hotels.hotel_id"), nullable=False, index=True)
    user_id = db.Column(db.Uuid(as_uuid=True), nullable=False, index=True)
    payment_intent_id = db.Column(db.String(255), nullable=False, unique=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    adult_count = db.Column(db.Integer, nullable=False)
    child_count = db.Column(db.Integer, nullable=False, default=0)
    check_in = db.Column(db.Date, nullable=False)
    check_out = db.Column(db.Date, nullable=False)
    total_cost = db.Column(db.Numeric(10, 2), nullable=False)
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )

    def to_dict(self):
        return {
            "booking_id":        str(self.booking_id),
            "hotel_id":          str(self.hotel_id),
            "user_id":           str(self.user_id),
            "payment_intent_id": self.payment_intent_id,
            "first_name":        self.first_name,
            "last_name":         self.last_name,
            "email":             self.email,
            "adult_count":       self.adult_count,
            "child_count":       self.child_count,
            "check_in":          self.check_in.isoformat(),
            "check_out":         self.check_out.isoformat(),
            "total_cost":        float(self.total_cost),
            "created_at":        self.created_at.isoformat() if self.created_at else None,
        }
