"""
Classification Model Module

Value types exchanged with intent classifiers.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union

NONE_INTENT = "None"


class Unconfigured:
    """
    Marker returned by a classifier whose capability is disabled.

    This is a valid, non-error response. Use the module level ``UNCONFIGURED``
    instance rather than creating new ones.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNCONFIGURED"


UNCONFIGURED = Unconfigured()


@dataclass(frozen=True)
class ClassificationResult:
    """
    Outcome of classifying a single utterance.

    Attributes:
        intent (str): The top scoring intent name.
        confidence (float): Score of the top intent, between 0 and 1.
        intents (Dict[str, float]): Score of every intent the classifier reported.
        entities (Dict[str, str]): Extracted entity values keyed by entity name.
        text (str): The classified utterance.
    """

    intent: str
    confidence: float
    intents: Dict[str, float] = field(default_factory=dict)
    entities: Dict[str, str] = field(default_factory=dict)
    text: str = ""


ClassifierResponse = Union[ClassificationResult, Unconfigured]


def top_intent(
    result: Optional[ClassifierResponse],
    default_intent: str = NONE_INTENT,
    min_score: float = 0.0,
) -> str:
    """
    Return the name of the top scoring intent.

    Args:
        result: A classification result, or ``UNCONFIGURED``/``None``.
        default_intent (str): Returned when there is no intent at or above ``min_score``.
        min_score (float): Minimum confidence for the top intent to count.

    Returns:
        str: The intent name.
    """
    if not isinstance(result, ClassificationResult):
        return default_intent

    best_name, best_score = default_intent, -1.0
    scores = dict(result.intents)
    if result.intent and result.intent not in scores:
        scores[result.intent] = result.confidence
    for name, score in scores.items():
        if score > best_score:
            best_name, best_score = name, score

    if best_score < min_score or best_score < 0:
        return default_intent
    return best_name
