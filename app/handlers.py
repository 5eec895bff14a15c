"""
Flask Application Handlers Module

This module provides error handling, request hooks, and shutdown handlers for the
Dialog Flow Orchestrator application. Orchestrator errors escaping a view are mapped to
JSON responses in the API's error shape:

  - StoreError and ClassifierError: 503. Nothing was saved or sent, so the turn may
    be retried.
  - ChannelError: 502. The turn was saved before delivery failed, so a retry would
    run the next step instead of repeating this one.
  - Flow configuration errors: 500.
"""

import atexit
import time
import uuid

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from adapters.loggers.logger_adapter import app_logger
from core.domain.errors import (
    ChannelError,
    FlowConfigurationError,
    InfrastructureError,
)

REQUEST_ID_HEADER = "X-Request-ID"


def error_body(message: str, error: Exception):
    return jsonify({"status": "error", "message": message, "details": str(error)})


def register_error_handlers(app: Flask) -> None:
    """
    Register custom error handlers for the Flask application.

    Args:
        app (Flask): The Flask application instance.
    """

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify({"error": "Resource not found", "message": str(error)}), 404

    @app.errorhandler(429)
    def handle_rate_limit_exceeded(error):
        app_logger.warning("Rate limit exceeded: %s", error)
        return jsonify({"error": "Too many requests", "message": str(error)}), 429

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        app_logger.error("HTTP exception: %s", error)
        return jsonify({"error": error.name, "message": error.description}), error.code

    @app.errorhandler(InfrastructureError)
    def handle_infrastructure_error(error):
        app_logger.error("Infrastructure error: %s", error)
        return error_body("Service temporarily unavailable", error), 503

    @app.errorhandler(ChannelError)
    def handle_channel_error(error):
        app_logger.error("Reply delivery failed after the turn was saved: %s", error)
        return error_body("Reply delivery failed", error), 502

    @app.errorhandler(FlowConfigurationError)
    def handle_flow_configuration_error(error):
        app_logger.error("Flow configuration error: %s", error, exc_info=True)
        return error_body("Flow configuration error", error), 500

    @app.errorhandler(Exception)
    def handle_exception(error):
        app_logger.error("Unhandled exception: %s", str(error), exc_info=True)
        return (
            jsonify(
                {
                    "error": "Internal server error",
                    "message": "An unexpected error occurred",
                }
            ),
            500,
        )


def register_request_hooks(app: Flask) -> None:
    """
    Register request processing hooks for the Flask application.

    Every request gets an id, taken from the X-Request-ID header when the client
    sends one, which is echoed back and included in the timing log line.

    Args:
        app (Flask): The Flask application instance.
    """

    @app.before_request
    def before_request():
        g.start_time = time.time()
        g.request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        app_logger.debug(
            "[%s] Request started: %s %s", g.request_id, request.method, request.path
        )

    @app.after_request
    def after_request(response):
        request_id = getattr(g, "request_id", None)
        if request_id:
            response.headers[REQUEST_ID_HEADER] = request_id
        if hasattr(g, "start_time"):
            elapsed = time.time() - g.start_time
            app_logger.info(
                "[%s] Request completed: %s %s - Status: %s - Time: %.4fs",
                request_id,
                request.method,
                request.path,
                response.status_code,
                elapsed,
            )
        return response


def register_shutdown_handlers(app: Flask) -> None:
    """
    Register application shutdown handlers.

    Args:
        app (Flask): The Flask application instance.
    """
    state_store = getattr(app, "state_store", None)

    def on_exit():
        app_logger.info(
            "Dialog Flow Orchestrator is shutting down with %s conversation(s) in memory",
            len(state_store) if state_store is not None else "unknown",
        )

    atexit.register(on_exit)
