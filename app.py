import logging

import click
from flask import Flask, jsonify
from flask_cors import CORS
from flask_migrate import Migrate

from config import Config
from routes import (
    health_bp,
    availability_bp,
    booking_bp,
    payments_bp,
    users_bp,
    admin_bp,
    doctors_bp,
    audit_bp,
)
from models import db
from models.user import Role
from services.charges import ChargeService
from services.errors import PortalError
from services.notifications import Notifier
from services.store import Store
from utils.auth_context import load_current_identity
from utils.seed import seed_services

logger = logging.getLogger(__name__)


def create_app(config_object=Config, store=None, notifier=None, charges=None):
    """
    Collaborators may be passed in already constructed (tests pass fakes);
    anything omitted is built from config.
    """
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Browser client runs on its own origin
    CORS(app, origins=app.config["CORS_ORIGINS"])
    logger.info("CORS allowed origins: %s", app.config["CORS_ORIGINS"])

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(availability_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(payments_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(doctors_bp)
    app.register_blueprint(audit_bp)

    # Database: one store per process, bound before serving
    (store or Store()).init_app(app)

    # Migrations
    Migrate(app, db)

    (notifier or Notifier()).init_app(app)
    (charges or ChargeService()).init_app(app)

    @app.before_request
    def _load_identity():
        load_current_identity()

    @app.errorhandler(PortalError)
    def _portal_error(exc):
        if exc.status_code >= 500:
            logger.error("%s: %s", type(exc).__name__, exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp


    register_cli(app)


    return app

#-------------------------

def register_cli(app):
    @app.cli.command("make-admin")
    @click.argument("email")
    def make_admin(email):
        """Promote a user to admin by email (bootstrap)."""
        user = app.extensions["store"].set_role(email.strip().lower(), Role.ADMIN)
        if not user:
            click.echo("User not found")
            return
        click.echo(f"{user.email} promoted to admin")

    @app.cli.command("seed-services")
    def seed_services_command():
        """Insert the default treatment catalog (idempotent)."""
        added = seed_services()
        click.echo(f"{added} service(s) added")

#-------------------------


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app = create_app()
    try:
        # Run locally
        app.run(host="127.0.0.1", port=app.config["PORT"], threaded=True)
    finally:
        app.extensions["notifier"].shutdown()
        app.extensions["store"].close()
