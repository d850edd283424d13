from flask import Blueprint, current_app, jsonify, request

from holistay.auth import current_user_id, token_required
from holistay.schemas import BookingRequest, PaymentIntentRequest, parse_body, parse_search_args
from holistay.services.auth_service import require_verified_user
from holistay.services.hotel_service import get_hotel, list_hotels, parse_hotel_id, search_hotels

hotels_bp = Blueprint('hotels', __name__)


def get_booking_workflow():
    return current_app.extensions['booking_workflow']


@hotels_bp.route('/search', methods=['GET'])
def search():
    """
    Search hotels
    ---
    tags:
      - Hotels
    parameters:
      - name: destination
        in: query
        type: string
      - name: adult_count
        in: query
        type: integer
      - name: child_count
        in: query
        type: integer
      - name: facilities
        in: query
        type: array
        items:
          type: string
      - name: types
        in: query
        type: array
        items:
          type: string
      - name: stars
        in: query
        type: array
        items:
          type: integer
      - name: max_price
        in: query
        type: number
      - name: sort_option
        in: query
        type: string
        enum: [starRating, pricePerNightAsc, pricePerNightDesc]
      - name: page
        in: query
        type: integer
        default: 1
    responses:
      200:
        description: One page (5 hotels) of matches
    """
    query = parse_search_args(request.args)
    return jsonify(search_hotels(query)), 200


@hotels_bp.route('', methods=['GET'])
def list_all():
    return jsonify([hotel.to_dict() for hotel in list_hotels()]), 200


@hotels_bp.route('/<hotel_id>', methods=['GET'])
def get_one(hotel_id):
    """
    Get a single hotel
    ---
    tags:
      - Hotels
    parameters:
      - name: hotel_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Hotel details
      404:
        description: Hotel not found
    """
    return jsonify(get_hotel(parse_hotel_id(hotel_id)).to_dict()), 200


@hotels_bp.route('/<hotel_id>/bookings/payment-intent', methods=['POST'])
@token_required
def create_payment_intent(hotel_id):
    """
    Create a payment intent for a stay
    ---
    tags:
      - Bookings
    security:
      - Bearer: []
    parameters:
      - name: hotel_id
        in: path
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - number_of_nights
          properties:
            number_of_nights:
              type: integer
    responses:
      200:
        description: payment_intent_id, client_secret and total_cost
      403:
        description: Email not verified
      404:
        description: Hotel not found
    """
    user = require_verified_user(current_user_id())
    hotel_id = parse_hotel_id(hotel_id)
    data = parse_body(PaymentIntentRequest)

    result = get_booking_workflow().create_authorization(
        hotel_id=hotel_id,
        number_of_nights=data.number_of_nights,
        user_id=user.user_id,
    )
    return jsonify(result), 200


@hotels_bp.route('/<hotel_id>/bookings', methods=['POST'])
@token_required
def create_booking(hotel_id):
    """
    Confirm a booking once its payment intent has succeeded
    ---
    tags:
      - Bookings
    security:
      - Bearer: []
    parameters:
      - name: hotel_id
        in: path
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - payment_intent_id
            - first_name
            - last_name
            - email
            - adult_count
            - check_in
            - check_out
          properties:
            payment_intent_id:
              type: string
            first_name:
              type: string
            last_name:
              type: string
            email:
              type: string
            adult_count:
              type: integer
            child_count:
              type: integer
            check_in:
              type: string
              format: date
            check_out:
              type: string
              format: date
    responses:
      201:
        description: Booking created
      400:
        description: Payment intent does not belong to this hotel/user
      402:
        description: Payment has not succeeded
      404:
        description: Hotel or payment intent not found
      409:
        description: Payment intent already used for a booking
    """
    user = require_verified_user(current_user_id())
    hotel_id = parse_hotel_id(hotel_id)
    data = parse_body(BookingRequest)

    booking = get_booking_workflow().confirm_booking(
        hotel_id=hotel_id,
        payment_intent_id=data.payment_intent_id,
        user_id=user.user_id,
        details=data,
    )
    return jsonify(booking.to_dict()), 201
