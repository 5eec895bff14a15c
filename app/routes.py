"""
Flask Application Routes Module

This module defines the base application routes: service information, including the
registered flows, and a health check reporting whether the intent classifier is
configured. A service without a configured classifier still answers every turn (its
flows end with an explanatory notice), so it is reported as degraded, not unhealthy.
"""

import time

from flask import Flask, jsonify


def register_routes(app: Flask) -> None:
    """
    Register basic application routes to the Flask app.

    Args:
        app (Flask): The Flask application instance.
    """

    @app.route("/")
    def index():
        """
        Root endpoint that returns basic service information.

        Returns:
            Response: JSON containing service status, version and flows.
        """
        return jsonify(
            {
                "status": "ok",
                "service": "dialog-flow-orchestrator",
                "version": app.config.get("VERSION", "0.1.0"),
                "default_flow": app.config.get("DEFAULT_FLOW_ID"),
                "flows": app.flow_controller.flow_ids(),
            }
        )

    @app.route("/health")
    def health():
        """
        Health check endpoint for monitoring service health.

        Returns:
            Response: JSON containing health status, classifier status and current timestamp.
        """
        classifier = app.classifier
        return jsonify(
            {
                "status": "healthy" if classifier.is_configured else "degraded",
                "classifier": {
                    "name": classifier.name,
                    "configured": classifier.is_configured,
                },
                "timestamp": time.time(),
            }
        )
