"""
Web server — Flask app factory.

Creates and configures the Flask application for the local security
dashboard. Provides JSON API endpoints and a single dashboard page.
"""

from __future__ import annotations

import logging
from pathlib import Path

from flask import Flask

from ocsec.core.context import AppContext

logger = logging.getLogger(__name__)

# Package directory for templates
_PACKAGE_DIR = Path(__file__).parent


def create_app(ctx: AppContext) -> Flask:
    """Create and configure the Flask application.

    Args:
        ctx: Application context shared by every request.

    Returns:
        Configured Flask application.
    """
    app = Flask(__name__, template_folder=str(_PACKAGE_DIR / "templates"))

    app.config["OCSEC_CONTEXT"] = ctx
    app.config["MOCK_MODE"] = ctx.mock_mode
    app.json.sort_keys = False

    # Register blueprints
    from ocsec.ui.web.routes_api import api_bp
    from ocsec.ui.web.routes_pages import pages_bp

    app.register_blueprint(pages_bp)
    app.register_blueprint(api_bp, url_prefix="/api")

    logger.info("Web app created (history=%s, mock=%s)", ctx.runs.path, ctx.mock_mode)
    return app


def run_server(
    app: Flask,
    host: str = "127.0.0.1",
    port: int = 7337,
    debug: bool = False,
) -> None:
    """Run the Flask development server."""
    logger.info("Starting dashboard on %s:%d", host, port)
    app.run(host=host, port=port, debug=debug, use_reloader=False)
