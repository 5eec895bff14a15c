"""
Classifier Factory Module

Builds the intent classifier selected by the CLASSIFIER_BACKEND setting.
"""

from typing import Any, Mapping

from adapters.clients.llm_intent_classifier import LLMIntentClassifier
from adapters.clients.luis_classifier import LuisClassifier
from core.domain.classification_model import UNCONFIGURED, ClassifierResponse
from core.interfaces.classifier_interface import IClassifier


class NullClassifier(IClassifier):
    """A classifier that is never configured."""

    name = "Intent classifier"

    @property
    def is_configured(self) -> bool:
        return False

    def classify(self, utterance: str) -> ClassifierResponse:
        return UNCONFIGURED


def create_classifier(config: Mapping[str, Any]) -> IClassifier:
    """
    Create the classifier named by ``config["CLASSIFIER_BACKEND"]``.

    Args:
        config (Mapping[str, Any]): Application configuration.

    Returns:
        IClassifier: The classifier instance.

    Raises:
        ValueError: If the backend name is unknown.
    """
    backend = str(config.get("CLASSIFIER_BACKEND", "none")).lower()
    timeout = config.get("CLASSIFIER_TIMEOUT")

    if backend == "luis":
        return LuisClassifier(
            app_id=config.get("LUIS_APP_ID", ""),
            api_key=config.get("LUIS_API_KEY", ""),
            host_name=config.get("LUIS_API_HOST_NAME", ""),
            slot=config.get("LUIS_SLOT"),
            timeout=timeout,
        )
    if backend == "openai":
        return LLMIntentClassifier(
            api_key=config.get("OPENAI_API_KEY", ""),
            model=config.get("OPENAI_MODEL"),
            timeout=timeout,
        )
    if backend == "none":
        return NullClassifier()
    raise ValueError(f"Unknown classifier backend: {backend}")
