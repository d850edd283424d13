from flask import Blueprint, jsonify, request
from flask_jwt_extended import set_access_cookies, unset_jwt_cookies

from holistay.auth import current_user_id, get_token_verifier, token_required
from holistay.schemas import LoginRequest, parse_body
from holistay.services.auth_service import authenticate_user, issue_access_token

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Authenticate user and return an access token
    ---
    tags:
      - Auth
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - email
            - password
          properties:
            email:
              type: string
            password:
              type: string
    responses:
      200:
        description: Login successful (token also set as the auth_token cookie)
      401:
        description: Invalid credentials
    """
    data = parse_body(LoginRequest)
    user = authenticate_user(data.email, data.password)
    access_token = issue_access_token(user)

    response = jsonify({
        'message': 'Login successful',
        'access_token': access_token,
        'user': user.to_dict(),
    })
    set_access_cookies(response, access_token)
    return response, 200


@auth_bp.route('/validate-token', methods=['GET'])
@token_required
def validate_token():
    return jsonify({'user_id': current_user_id()}), 200


@auth_bp.route('/logout', methods=['POST'])
@token_required
def logout():
    """
    Logout user (revoke the token and clear the auth cookie)
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logout successful
      401:
        description: Missing or invalid token
    """
    verifier = get_token_verifier()
    verifier.revoke(verifier.extract(request))

    response = jsonify({'message': 'Logout successful'})
    unset_jwt_cookies(response)
    return response, 200
