import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


def _database_uri():
    if os.environ.get('DATABASE_URL'):
        return os.environ['DATABASE_URL']
    db_user = os.environ.get('DB_USER', 'holistay_user')
    db_pass = os.environ.get('DB_PASS', 'password')
    db_host = os.environ.get('DB_HOST', 'holistay-db')
    db_name = os.environ.get('DB_NAME', 'holistay_db')
    return f"postgresql://{db_user}:{db_pass}@{db_host}/{db_name}"


class Config:
    SQLALCHEMY_DATABASE_URI = _database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Tokens are read from the auth_token cookie first, then the bearer header
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET', 'dev-secret-change-me')
    JWT_TOKEN_LOCATION = ['cookies', 'headers']
    JWT_ACCESS_COOKIE_NAME = 'auth_token'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=1)
    JWT_COOKIE_SECURE = os.environ.get('COOKIE_SECURE', 'false').lower() == 'true'
    JWT_COOKIE_CSRF_PROTECT = False

    STRIPE_API_KEY = os.environ.get('STRIPE_API_KEY', '')
    PAYMENT_CURRENCY = os.environ.get('PAYMENT_CURRENCY', 'gbp')

    MAIL_BACKEND = os.environ.get('MAIL_BACKEND', 'console')
    SMTP_HOST = os.environ.get('SMTP_HOST', 'smtp.gmail.com')
    SMTP_PORT = int(os.environ.get('SMTP_PORT', '587'))
    SMTP_USER = os.environ.get('SMTP_USER', '')
    SMTP_PASSWORD = os.environ.get('SMTP_PASSWORD', '')
    MAIL_FROM = os.environ.get('MAIL_FROM', 'HoliStay <no-reply@holistay.com>')

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FILE = os.environ.get('LOG_FILE')
