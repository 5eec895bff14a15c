"""
Flask Extensions Module

This module handles the registration and configuration of Flask extensions used by the
Dialog Flow Orchestrator application: CORS for the conversation API and a rate limiter
keyed by conversation, so one chatty conversation cannot starve the others.

Extensions are conditionally registered based on the application configuration,
with some being disabled during testing to simplify the test environment.
"""

from flask import Flask, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from adapters.loggers.logger_adapter import app_logger


def conversation_rate_limit_key() -> str:
    """
    Rate limit key for the current request.

    Requests addressed to a conversation are limited per conversation id; every
    other request is limited per client address.

    Returns:
        str: The rate limit bucket key.
    """
    conversation_id = (request.view_args or {}).get("conversation_id")
    if conversation_id:
        return f"conversation:{conversation_id}"
    return get_remote_address()


def register_extensions(app: Flask) -> None:
    """
    Register and initialize Flask extensions for the application.

    Args:
        app (Flask): The Flask application instance to register extensions with.
    """
    if app.config["TESTING"]:
        app_logger.debug("Extensions disabled in testing mode")
        return

    CORS(
        app,
        resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
    )
    Limiter(
        app=app,
        key_func=conversation_rate_limit_key,
        default_limits=app.config.get(
            "DEFAULT_RATE_LIMITS", ["1000 per day", "60 per minute"]
        ),
    )
    app_logger.debug("Extensions registered")
