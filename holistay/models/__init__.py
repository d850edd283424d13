from holistay.models.user import User
from holistay.models.hotel import Hotel, HotelFacility, Booking
