from flask import Blueprint, current_app, jsonify
from flask_jwt_extended import set_access_cookies

from holistay.auth import current_user_id, token_required
from holistay.errors import EmailDeliveryError
from holistay.logger import get_logger
from holistay.schemas import RegisterRequest, ResendOtpRequest, VerifyEmailRequest, parse_body
from holistay.services.auth_service import get_user, issue_access_token
from holistay.services.otp_service import (
    register_identity,
    resend_challenge,
    send_verification_email,
    verify_challenge,
)

logger = get_logger("routes.users")

users_bp = Blueprint('users', __name__)


@users_bp.route('/me', methods=['GET'])
@token_required
def get_me():
    """
    Get the current user's profile
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: User profile
      401:
        description: Missing or invalid token
    """
    user = get_user(current_user_id())
    return jsonify(user.to_dict()), 200


@users_bp.route('/register', methods=['POST'])
def register():
    """
    Register a new user and email them a verification code
    ---
    tags:
      - Users
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - first_name
            - last_name
            - email
            - password
          properties:
            first_name:
              type: string
            last_name:
              type: string
            email:
              type: string
            password:
              type: string
    responses:
      201:
        description: User registered, verification email sent
      400:
        description: Invalid input
      409:
        description: Email already exists
      502:
        description: User registered but the verification email could not be sent
    """
    data = parse_body(RegisterRequest)
    user, code = register_identity(
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        password=data.password,
    )

    try:
        send_verification_email(current_app.extensions['mailer'], user, code)
    except EmailDeliveryError:
        logger.exception(f"Verification email to user {user.user_id} failed")
        raise

    response = jsonify({
        'message': 'User registered successfully. Please verify your email.',
        'user': user.email,
        'user_id': str(user.user_id),
    })
    set_access_cookies(response, issue_access_token(user))
    return response, 201


@users_bp.route('/verify-email', methods=['POST'])
def verify_email():
    """
    Verify email ownership with the emailed OTP
    ---
    tags:
      - Users
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - email
            - otp
          properties:
            email:
              type: string
            otp:
              type: string
    responses:
      200:
        description: Email verified
      400:
        description: Invalid, expired or missing OTP
      404:
        description: User not found
      409:
        description: Email already verified
    """
    data = parse_body(VerifyEmailRequest)
    verify_challenge(data.email, data.otp)
    return jsonify({'message': 'Email verified successfully'}), 200


@users_bp.route('/resend-otp', methods=['POST'])
def resend_otp():
    data = parse_body(ResendOtpRequest)
    user, code = resend_challenge(data.email)
    send_verification_email(current_app.extensions['mailer'], user, code, resend=True)
    return jsonify({'message': 'OTP resent successfully'}), 200
