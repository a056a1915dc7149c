"""
HTTP API for the scraped timetables.
"""

import hmac
import logging

from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from mykbus.cache import TimetableService
from mykbus.config import Config
from mykbus.scrape.error import ScrapeError

ROOT_MESSAGE = "Mykonos Bus Map API is running!"


def _authorized(expected: str | None, given: str | None) -> bool:
    if not expected or given is None:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), given.encode("utf-8"))


def create_app(config: Config, service: TimetableService) -> Flask:
    """
    Build the Flask app around a TimetableService.
    """

    app = Flask(__name__)
    # keep routes in catalog order
    app.json.sort_keys = False  # type: ignore[attr-defined]

    CORS(
        app,
        origins=config.allowed_origins,
        methods=["GET", "OPTIONS"],
        supports_credentials=False,
    )

    logger = service.ctx.logger

    @app.get("/")
    def index() -> Response:
        logger.info("root route hit")
        return Response(ROOT_MESSAGE, status=200, mimetype="text/plain")

    @app.get("/api/timetables")
    def timetables():
        try:
            schedule_set = service.get_timetables()
        except ScrapeError as exc:
            logger.error("no timetables to serve: %s", exc)
            return jsonify({"error": f"Failed to fetch timetables: {exc}"}), 500

        return jsonify(schedule_set.to_payload())

    @app.get("/api/refresh")
    def refresh():
        if not _authorized(config.refresh_secret, request.args.get("secret")):
            logger.warning("refresh rejected from %s", request.remote_addr)
            return jsonify({"error": "Unauthorized"}), 403

        try:
            schedule_set = service.refresh()
        except ScrapeError as exc:
            return jsonify({"error": f"Refresh failed: {exc}"}), 500

        return jsonify(schedule_set.to_payload())

    @app.errorhandler(Exception)
    def unexpected_error(exc: Exception):
        if isinstance(exc, HTTPException):
            return exc

        logger.exception("unhandled error serving %s", request.path)
        return jsonify({"error": f"Internal error: {exc.__class__.__name__}"}), 500

    return app


def run(config: Config, service: TimetableService, host: str = "0.0.0.0") -> None:
    """
    Run the API with Flask's threaded server.
    """

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    app = create_app(config, service)
    service.ctx.logger.info("serving on %s:%d", host, config.port)
    app.run(host=host, port=config.port, debug=False, use_reloader=False, threaded=True)
