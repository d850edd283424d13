from flask import Flask, jsonify
from flasgger import Swagger
from werkzeug.exceptions import HTTPException

from holistay.auth import TokenVerifier
from holistay.config import Config
from holistay.errors import HoliStayError
from holistay.extensions import db, jwt
from holistay.logger import configure_logging, get_logger
from holistay.mailer import ConsoleMailer, create_mailer
from holistay.payments import StripePaymentProvider
from holistay.services.booking_service import BookingWorkflow
from holistay import models  # noqa: F401  register models


def create_app(test_config=None, payment_provider=None, mailer=None):
    app = Flask(__name__)

    # Configuration
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    configure_logging(app.config['LOG_LEVEL'], app.config.get('LOG_FILE'))
    logger = get_logger("app")

    # Initialize Extensions
    db.init_app(app)
    jwt.init_app(app)

    # Collaborators are injected so tests can swap in doubles
    mailer = mailer or create_mailer(app.config)
    if isinstance(mailer, ConsoleMailer) and not app.config.get('TESTING'):
        logger.warning("MAIL_BACKEND is console: verification codes are logged, not emailed")
    payment_provider = payment_provider or StripePaymentProvider(app.config['STRIPE_API_KEY'])
    app.extensions['mailer'] = mailer
    app.extensions['token_verifier'] = TokenVerifier.from_config(app.config)
    app.extensions['booking_workflow'] = BookingWorkflow(
        payment_provider=payment_provider,
        mailer=mailer,
        currency=app.config['PAYMENT_CURRENCY'],
    )

    Swagger(app)

    @app.errorhandler(HoliStayError)
    def handle_domain_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({
            "success": False,
            "error_code": error.name.upper().replace(" ", "_"),
            "message": error.description,
        }), error.code

    # Register Blueprints
    from holistay.routes.auth import auth_bp
    app.register_blueprint(auth_bp, url_prefix='/api/auth')

    from holistay.routes.users import users_bp
    app.register_blueprint(users_bp, url_prefix='/api/users')

    from holistay.routes.hotels import hotels_bp
    app.register_blueprint(hotels_bp, url_prefix='/api/hotels')

    @app.route('/health')
    def health():
        try:
            db.session.execute(db.text('SELECT 1'))
            return {"service": "holistay", "status": "healthy"}, 200
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return {"service": "holistay", "status": "unhealthy", "error": str(e)}, 503

    logger.debug(f"Routes: {app.url_map}")
    return app


if __name__ == '__main__':
    app = create_app()
    with app.app_context():
        db.create_all()
    app.run(host='0.0.0.0', port=5000)
