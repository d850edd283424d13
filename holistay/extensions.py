from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager

db = SQLAlchemy()
jwt = JWTManager()

# jti of every access token revoked by logout in this process
BLOCKLIST = set()
