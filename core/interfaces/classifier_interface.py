"""
Classifier Interface Module

This module defines the interface for intent classifiers (natural-language
understanding services). A classifier whose capability is disabled answers
``UNCONFIGURED`` instead of raising.
"""

from abc import ABC, abstractmethod

from core.domain.classification_model import ClassifierResponse


class IClassifier(ABC):
    """
    Interface for an intent classifier.

    Implementations must provide a human readable ``name``, report whether they are
    configured, and classify single utterances.
    """

    name = "Classifier"

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """
        Whether the classifier has everything it needs to answer queries.

        Returns:
            bool: True if ``classify`` can return a ClassificationResult.
        """

    @abstractmethod
    def classify(self, utterance: str) -> ClassifierResponse:
        """
        Classify an utterance.

        Args:
            utterance (str): The user's text.

        Returns:
            ClassifierResponse: A ClassificationResult, or UNCONFIGURED when the
                capability is disabled.

        Raises:
            ClassifierError: If the classification service fails.
        """
