"""
Configuration Module

This module contains configuration classes for the Dialog Flow Orchestrator application.
It provides a base configuration as well as settings for development, production,
and testing environments.
"""

import os


class Config:
    """
    Base configuration class.

    Attributes:
        DEBUG (bool): Enables or disables debug mode.
        TESTING (bool): Indicates if the application is in testing mode.
        LOG_LEVEL (str): Defines the logging level.
        SECRET_KEY (str): Secret key used for application security.
        VERSION (str): Application version.
        HOST (str): Host address for binding.
        PORT (int): Port number for binding.
        CORS_ORIGINS (str): Allowed origins for Cross-Origin Resource Sharing.
        DEFAULT_RATE_LIMITS (list): Default rate limit values.
        DEFAULT_FLOW_ID (str): Flow started for conversations with no active flow.
        MAX_STEPS_PER_TURN (int): Upper bound on steps chained within a single turn.
        CLASSIFIER_BACKEND (str): Intent classifier to use ("luis", "openai" or "none").
        CLASSIFIER_MIN_CONFIDENCE (float): Score below which the top intent is ignored.
        CLASSIFIER_TIMEOUT (float): HTTP timeout in seconds for classifier calls.
        LUIS_APP_ID (str): LUIS application id.
        LUIS_API_KEY (str): LUIS prediction key.
        LUIS_API_HOST_NAME (str): LUIS prediction endpoint host name.
        LUIS_SLOT (str): LUIS publishing slot.
        OPENAI_API_KEY (str): API key for the LLM intent classifier.
        OPENAI_MODEL (str): Chat model used by the LLM intent classifier.
    """

    DEBUG = os.environ.get("DEBUG", "False").lower() == "true"
    TESTING = os.environ.get("TESTING", "False").lower() == "true"
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    SECRET_KEY = os.environ.get("SECRET_KEY", "development-key-change-in-production")

    VERSION = "0.1.0"
    HOST = os.environ.get("HOST", "0.0.0.0")
    PORT = int(os.environ.get("PORT", 3978))
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    DEFAULT_RATE_LIMITS = ["1000 per day", "60 per minute"]

    DEFAULT_FLOW_ID = os.environ.get("DEFAULT_FLOW_ID", "booking")
    MAX_STEPS_PER_TURN = int(os.environ.get("MAX_STEPS_PER_TURN", "16"))

    CLASSIFIER_BACKEND = os.environ.get("CLASSIFIER_BACKEND", "luis").lower()
    CLASSIFIER_MIN_CONFIDENCE = float(
        os.environ.get("CLASSIFIER_MIN_CONFIDENCE", "0.0")
    )
    CLASSIFIER_TIMEOUT = float(os.environ.get("CLASSIFIER_TIMEOUT", "5"))

    LUIS_APP_ID = os.environ.get("LUIS_APP_ID", "")
    LUIS_API_KEY = os.environ.get("LUIS_API_KEY", "")
    LUIS_API_HOST_NAME = os.environ.get("LUIS_API_HOST_NAME", "")
    LUIS_SLOT = os.environ.get("LUIS_SLOT", "production")

    OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY", "your-api-key-here")
    OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")


class DevelopmentConfig(Config):
    """
    Development configuration class.

    Inherits from Config and sets configuration settings specific to the development environment.
    """

    DEBUG = True
    LOG_LEVEL = "DEBUG"


class ProductionConfig(Config):
    """
    Production configuration class.

    Inherits from Config and sets configuration settings specific to the production environment.
    """

    DEBUG = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING")


class TestingConfig(Config):
    """
    Testing configuration class.

    Inherits from Config and sets configuration settings specific to the testing environment.
    The classifier is disabled so that no test reaches a remote service.
    """

    TESTING = True
    DEBUG = True
    LOG_LEVEL = "DEBUG"
    CLASSIFIER_BACKEND = "none"
