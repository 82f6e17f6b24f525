"""Topic classifiers: keyword scoring and trainable Naive Bayes."""

from .base import (
    ClassificationResult,
    Classifier,
    ClassifierError,
    ClassifierNotTrainedError,
    TrainingError,
)
from .corpus import read_training_csv
from .factory import create_classifier
from .keyword import KeywordClassifier
from .naive_bayes import NaiveBayesClassifier

__all__ = [
    "ClassificationResult",
    "Classifier",
    "ClassifierError",
    "ClassifierNotTrainedError",
    "TrainingError",
    "read_training_csv",
    "create_classifier",
    "KeywordClassifier",
    "NaiveBayesClassifier",
]
