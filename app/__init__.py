"""
Flask Application Factory Module

This module provides a factory pattern implementation for creating and configuring
a Flask application for the Dialog Flow Orchestrator service. It handles the registration
of extensions, use cases, flows, blueprints, error handlers, request hooks, shutdown
handlers, and basic routes.

The ApplicationFactory class ensures consistent application setup with proper
dependency injection and configuration based on the environment.
"""

import os
from typing import Optional, Type

from flask import Flask

from adapters.channels.buffered_output_channel import BufferedOutputChannel
from adapters.clients.classifier_factory import create_classifier
from adapters.controllers.dialog_controller import create_dialog_blueprint
from adapters.loggers.logger_adapter import app_logger
from adapters.stores.memory_state_store import InMemoryStateStore
from app.extensions import register_extensions
from app.handlers import (
    register_error_handlers,
    register_request_hooks,
    register_shutdown_handlers,
)
from app.routes import register_routes
from config import Config, DevelopmentConfig, ProductionConfig, TestingConfig
from core.interfaces.classifier_interface import IClassifier
from core.services.flow_controller import FlowController
from core.services.main_dialog import MainDialog
from usecases.handle_turn_use_case import HandleTurnUseCase


class ApplicationFactory:
    """
    Factory class for creating and configuring a Flask application.
    """

    @staticmethod
    def create_app(
        config_class: Type[Config] = None, classifier: Optional[IClassifier] = None
    ) -> Flask:
        """
        Creates and configures a Flask application instance.

        Args:
            config_class (Type[Config], optional): The configuration class to use. Defaults to None.
            classifier (IClassifier, optional): Intent classifier overriding the
                configured CLASSIFIER_BACKEND. Defaults to None.

        Returns:
            Flask: The configured Flask application instance.
        """
        if config_class is None:
            env = os.environ.get("FLASK_ENV", "development").lower()
            config_map = {
                "development": DevelopmentConfig,
                "production": ProductionConfig,
                "testing": TestingConfig,
            }
            config_class = config_map.get(env, DevelopmentConfig)

        flask_app = Flask(__name__)
        flask_app.config.from_object(config_class)

        register_extensions(flask_app)
        ApplicationFactory._register_use_cases(flask_app, classifier)
        ApplicationFactory._register_blueprints(flask_app)
        register_error_handlers(flask_app)
        register_request_hooks(flask_app)
        register_shutdown_handlers(flask_app)
        register_routes(flask_app)

        app_logger.info(
            "Dialog Flow Orchestrator started in %s mode",
            os.environ.get("FLASK_ENV", "development").lower(),
        )
        return flask_app

    @staticmethod
    def _register_use_cases(
        flask_app: Flask, classifier: Optional[IClassifier] = None
    ) -> None:
        """
        Builds the flow controller, registers the flows and attaches the use cases to the Flask app.

        Args:
            flask_app (Flask): The Flask application instance.
            classifier (IClassifier, optional): Classifier to use instead of the configured one.
        """
        state_store = InMemoryStateStore()
        output_channel = BufferedOutputChannel()
        if classifier is None:
            classifier = create_classifier(flask_app.config)

        flow_controller = FlowController(
            state_store,
            output_channel,
            default_flow_id=flask_app.config["DEFAULT_FLOW_ID"],
            max_steps_per_turn=flask_app.config["MAX_STEPS_PER_TURN"],
        )
        MainDialog(
            classifier,
            flow_id=flask_app.config["DEFAULT_FLOW_ID"],
            min_confidence=flask_app.config["CLASSIFIER_MIN_CONFIDENCE"],
        ).register(flow_controller)

        flask_app.classifier = classifier
        flask_app.state_store = state_store
        flask_app.flow_controller = flow_controller
        flask_app.handle_turn_use_case = HandleTurnUseCase(
            flow_controller, output_channel, state_store
        )

    @staticmethod
    def _register_blueprints(flask_app: Flask) -> None:
        """
        Registers blueprints for the Flask application.

        Args:
            flask_app (Flask): The Flask application instance.
        """
        dialog_bp = create_dialog_blueprint(flask_app.handle_turn_use_case)
        flask_app.register_blueprint(dialog_bp)


create_app = ApplicationFactory.create_app

app = create_app()

if __name__ == "__main__":
    app.run(
        host=app.config.get("HOST", "0.0.0.0"),
        port=app.config.get("PORT", 3978),
        debug=app.config.get("DEBUG", False),
    )
