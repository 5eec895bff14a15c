"""
LUIS Classifier Module

This module implements the HTTP client adapter for the LUIS (Language Understanding)
v3 prediction API. It sends the user's utterance to the published LUIS application and
maps the prediction to a ClassificationResult.
"""

from typing import Any, Dict, Optional

import requests

from adapters.loggers.logger_adapter import app_logger
from config import Config
from core.domain.classification_model import (
    NONE_INTENT,
    UNCONFIGURED,
    ClassificationResult,
    ClassifierResponse,
)
from core.domain.errors import ClassifierError
from core.interfaces.classifier_interface import IClassifier

# LUIS entity names mapped to booking fields, first match wins.
ENTITY_FIELDS = {
    "origin": ("From", "origin"),
    "destination": ("To", "destination"),
    "travel_date": ("TravelDate", "datetimeV2", "datetime"),
}


def first_entity_value(value: Any) -> Optional[str]:
    """
    Dig the first scalar out of a LUIS v3 entity value.

    Entity values nest lists and objects, e.g. ``[{"Airport": [["Paris"]]}]`` for a
    list entity or ``[{"type": "date", "values": [{"timex": "2026-10-20"}]}]`` for a
    datetime. Datetime objects resolve to their timex expression.
    """
    if value is None:
        return None
    if isinstance(value, (str, int, float)):
        return str(value)
    if isinstance(value, list):
        for item in value:
            found = first_entity_value(item)
            if found:
                return found
        return None
    if isinstance(value, dict):
        for key in ("timex", "values", "value", "text"):
            if key in value:
                return first_entity_value(value[key])
        for key, item in value.items():
            if key.startswith("$"):
                continue
            found = first_entity_value(item)
            if found:
                return found
    return None


class LuisClassifier(IClassifier):
    """
    Concrete implementation of the IClassifier interface using the LUIS v3 REST API.

    The classifier is unconfigured, and answers UNCONFIGURED without any request,
    when the application id, the key or the host name is missing.
    """

    name = "LUIS"

    def __init__(
        self,
        app_id: Optional[str] = None,
        api_key: Optional[str] = None,
        host_name: Optional[str] = None,
        slot: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.app_id = app_id if app_id is not None else Config.LUIS_APP_ID
        self.api_key = api_key if api_key is not None else Config.LUIS_API_KEY
        host_name = host_name if host_name is not None else Config.LUIS_API_HOST_NAME
        self.host_name = host_name.replace("https://", "").replace("http://", "").strip("/")
        self.slot = slot or Config.LUIS_SLOT
        self.timeout = timeout if timeout is not None else Config.CLASSIFIER_TIMEOUT
        app_logger.info(
            "LuisClassifier initialized (configured=%s, host=%s)",
            self.is_configured,
            self.host_name or "-",
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.app_id and self.api_key and self.host_name)

    @property
    def endpoint(self) -> str:
        return (
            f"https://{self.host_name}/luis/prediction/v3.0/apps/"
            f"{self.app_id}/slots/{self.slot}/predict"
        )

    def classify(self, utterance: str) -> ClassifierResponse:
        """
        Query LUIS for the intents and entities of an utterance.

        Args:
            utterance (str): The user's text.

        Returns:
            ClassifierResponse: The mapped prediction, or UNCONFIGURED.

        Raises:
            ClassifierError: If the request fails or LUIS answers with an error.
        """
        if not self.is_configured:
            return UNCONFIGURED
        if not utterance or not utterance.strip():
            return ClassificationResult(NONE_INTENT, 0.0, text=utterance or "")

        params = {
            "subscription-key": self.api_key,
            "query": utterance,
            "show-all-intents": "true",
            "verbose": "false",
        }
        try:
            app_logger.debug("Querying LUIS at %s", self.endpoint)
            response = requests.get(self.endpoint, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            app_logger.error("Error during LUIS query: %s", str(e))
            raise ClassifierError(f"LUIS request failed: {e}") from e

        if response.status_code != 200:
            app_logger.error(
                "LUIS query failed with status %s: %s",
                response.status_code,
                response.text,
            )
            raise ClassifierError(f"LUIS returned HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            app_logger.error("LUIS returned invalid JSON: %s", response.text)
            raise ClassifierError("LUIS returned invalid JSON") from e

        return self._to_result(utterance, payload)

    @staticmethod
    def _to_result(utterance: str, payload: Dict[str, Any]) -> ClassificationResult:
        prediction = payload.get("prediction") or {}
        intents = {
            name: float((details or {}).get("score", 0.0))
            for name, details in (prediction.get("intents") or {}).items()
        }
        intent = prediction.get("topIntent") or NONE_INTENT
        if intent not in intents and intents:
            intent = max(intents, key=intents.get)

        raw_entities = prediction.get("entities") or {}
        entities = {}
        for field_name, entity_names in ENTITY_FIELDS.items():
            for entity_name in entity_names:
                value = first_entity_value(raw_entities.get(entity_name))
                if value:
                    entities[field_name] = value
                    break

        result = ClassificationResult(
            intent=intent,
            confidence=intents.get(intent, 0.0),
            intents=intents,
            entities=entities,
            text=utterance,
        )
        app_logger.info(
            "LUIS classified utterance as %s (%.2f)", result.intent, result.confidence
        )
        return result
