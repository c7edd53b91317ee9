# --- shopfront/__init__.py ---
import logging

from flask import Flask, jsonify

from .config import Config
from .errors import register_error_handlers, register_jwt_handlers
from .extensions import db, jwt, cors, migrate


def create_app(test_config=None):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    Config.init_app(app)
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(level=app.config["LOG_LEVEL"])
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Init extensions
    db.init_app(app)
    jwt.init_app(app)
    cors.init_app(app, resources={r"/*": {"origins": "*"}})
    migrate.init_app(app, db)

    register_error_handlers(app)
    register_jwt_handlers(jwt)

    # Register blueprints
    from .auth import bp as auth_bp; app.register_blueprint(auth_bp)
    from .storefront import bp as storefront_bp; app.register_blueprint(storefront_bp)
    from .cart import bp as cart_bp; app.register_blueprint(cart_bp)
    from .checkout import bp as checkout_bp; app.register_blueprint(checkout_bp)
    from .admin import bp as admin_bp; app.register_blueprint(admin_bp)
    from .address import bp as address_bp; app.register_blueprint(address_bp)

    from .cli import register_cli
    register_cli(app)

    @app.get("/")
    def health():
        return jsonify(ok=True, msg="shopfront running")

    with app.app_context():
        from . import model  # noqa: F401  (register tables)
        db.create_all()
        app.logger.debug("blueprints: %s", sorted(app.blueprints.keys()))

    return app
