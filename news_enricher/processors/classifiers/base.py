from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List


class ClassifierError(Exception):
    """Base class for classification engine errors."""


class ClassifierNotTrainedError(ClassifierError):
    """Raised when a trainable classifier is asked to classify before training."""


class TrainingError(ClassifierError):
    """Raised when a training corpus cannot produce a usable model."""


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    category: str
    confidence: float
    explanation: str
    scores: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "confidence": self.confidence,
            "reasoning": self.explanation,
            "scores": dict(self.scores),
        }


def clamp_confidence(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


class Classifier(ABC):
    """Topic classifier interface shared by every backend."""

    kind: ClassVar[str]

    @property
    @abstractmethod
    def is_trained(self) -> bool:
        """True once the classifier can answer ``classify``."""

    @property
    @abstractmethod
    def categories(self) -> List[str]:
        """Labels this classifier can return, in enumeration order."""

    @abstractmethod
    def classify(self, text: str) -> ClassificationResult:
        """Return category, confidence, explanation and raw scores for text."""

    @abstractmethod
    def stats(self) -> Dict[str, Any]:
        """Introspection data for diagnostics endpoints."""
