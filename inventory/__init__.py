"""Flask application package for the inventory registry."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from dotenv import load_dotenv
from flask import Flask


def create_app(overrides: Mapping[str, Any] | None = None) -> Flask:
    """Application factory.

    Args:
        overrides: Config values applied on top of the environment-based
            config class (command line flags, tests).

    Returns:
        Configured Flask application.
    """
    load_dotenv()

    from inventory.config import get_config
    from inventory.dependencies import init_services
    from inventory.error_handlers import register_error_handlers
    from inventory.logging_config import configure_logging
    from inventory.routes.health import health_bp
    from inventory.routes.inventory import inventory_bp

    app = Flask(__name__)
    app.config.from_object(get_config())
    if overrides:
        app.config.update(overrides)

    configure_logging(app)
    init_services(app)
    register_error_handlers(app)

    app.register_blueprint(health_bp)
    app.register_blueprint(inventory_bp)

    return app
