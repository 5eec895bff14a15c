"""
LLM Intent Classifier Module

This module implements an IClassifier backed by an OpenAI chat model. The
classification prompt is composed with a LangChain PromptTemplate listing the intents
the booking flow understands, and the model is asked to answer with a JSON object.
"""

import json
from typing import Any, Dict, Optional

from langchain_core.prompts import PromptTemplate
from openai import OpenAI, OpenAIError

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

PLACEHOLDER_API_KEY = "your-api-key-here"

DEFAULT_INTENTS = {
    "BookFlight": "The user wants to book a flight or a trip",
    "Confirm": "The user agrees, confirms or answers yes",
    "Cancel": "The user declines, cancels or answers no",
    NONE_INTENT: "Anything else",
}

ENTITY_FIELDS = ("origin", "destination", "travel_date")


class LLMIntentClassifier(IClassifier):
    """
    Intent classifier using the OpenAI chat completions API.

    Attributes:
        model (str): The chat model name.
        intents (Dict[str, str]): Known intent names and their descriptions.
    """

    name = "OpenAI"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        intents: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        client: Any = None,
    ):
        self.api_key = api_key if api_key is not None else Config.OPENAI_API_KEY
        self.model = model or Config.OPENAI_MODEL
        self.intents = dict(intents or DEFAULT_INTENTS)
        self.timeout = timeout if timeout is not None else Config.CLASSIFIER_TIMEOUT
        self._client = client
        self.prompt_template = PromptTemplate(
            input_variables=["intent_list", "utterance"],
            template=(
                "You classify messages sent to a travel booking assistant.\n\n"
                "### INTENTS\n"
                "{intent_list}\n\n"
                "### ENTITIES\n"
                "Extract when present: origin (departure city), destination "
                "(arrival city), travel_date (ISO format YYYY-MM-DD).\n\n"
                "### OUTPUT\n"
                "Return ONLY a JSON object of the form "
                '{{"intent": "<intent name>", "confidence": <0.0-1.0>, '
                '"entities": {{"origin": "...", "destination": "...", '
                '"travel_date": "..."}}}}\n\n'
                "### MESSAGE\n"
                "{utterance}"
            ),
        )

    @property
    def is_configured(self) -> bool:
        return self._client is not None or bool(
            self.api_key and self.api_key != PLACEHOLDER_API_KEY
        )

    @property
    def client(self):
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key, timeout=self.timeout)
        return self._client

    def compose_prompt(self, utterance: str) -> str:
        intent_list = "\n".join(
            f"- {name}: {description}" for name, description in self.intents.items()
        )
        return self.prompt_template.format(intent_list=intent_list, utterance=utterance)

    def classify(self, utterance: str) -> ClassifierResponse:
        """
        Ask the chat model for the intent of an utterance.

        Args:
            utterance (str): The user's text.

        Returns:
            ClassifierResponse: The parsed classification, or UNCONFIGURED.

        Raises:
            ClassifierError: If the OpenAI API call fails.
        """
        if not self.is_configured:
            return UNCONFIGURED
        if not utterance or not utterance.strip():
            return ClassificationResult(NONE_INTENT, 0.0, text=utterance or "")

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": self.compose_prompt(utterance)}],
                temperature=0,
                max_tokens=150,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            app_logger.error("Error during LLM intent classification: %s", str(e))
            raise ClassifierError(f"OpenAI request failed: {e}") from e

        content = response.choices[0].message.content or ""
        return self._parse(utterance, content)

    def _parse(self, utterance: str, content: str) -> ClassificationResult:
        try:
            data = json.loads(content)
        except ValueError:
            app_logger.warning("Unparseable classifier output: %s", content)
            return ClassificationResult(NONE_INTENT, 0.0, text=utterance)
        if not isinstance(data, dict):
            return ClassificationResult(NONE_INTENT, 0.0, text=utterance)

        intent = str(data.get("intent") or NONE_INTENT)
        if intent not in self.intents:
            app_logger.info("Model answered unknown intent '%s'", intent)
            intent = NONE_INTENT
        try:
            confidence = min(max(float(data.get("confidence", 0.0)), 0.0), 1.0)
        except (TypeError, ValueError):
            confidence = 0.0

        raw_entities = data.get("entities") or {}
        entities = {}
        if isinstance(raw_entities, dict):
            entities = {
                name: str(raw_entities[name])
                for name in ENTITY_FIELDS
                if raw_entities.get(name)
            }

        app_logger.info("LLM classified utterance as %s (%.2f)", intent, confidence)
        return ClassificationResult(
            intent=intent,
            confidence=confidence,
            intents={intent: confidence},
            entities=entities,
            text=utterance,
        )
