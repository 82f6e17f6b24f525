from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional, Sequence

from .base import Classifier, TrainingError


def create_classifier(
    *,
    backend: Optional[str] = None,
    keywords: Optional[Mapping[str, Sequence[str]]] = None,
    training_csv: Path | str | None = None,
) -> Classifier:
    """Create a classifier based on CLASSIFIER_BACKEND env or explicit value.

    Supported values: "keyword" (default) or "bayes". The Bayes backend is
    trained from ``training_csv`` (or CLASSIFIER_TRAINING_CSV) before it
    is returned.
    """
    selected = (backend or os.environ.get("CLASSIFIER_BACKEND", "keyword")).lower()

    if selected == "keyword":
        from .keyword import KeywordClassifier

        return KeywordClassifier(keywords)
    if selected in ("bayes", "naive_bayes"):
        from .corpus import read_training_csv
        from .naive_bayes import NaiveBayesClassifier

        csv_path = training_csv or os.environ.get("CLASSIFIER_TRAINING_CSV")
        if not csv_path:
            raise TrainingError("The bayes backend needs a training CSV (CLASSIFIER_TRAINING_CSV)")
        corpus = read_training_csv(csv_path)
        classifier = NaiveBayesClassifier()
        classifier.train(corpus.rows)
        return classifier

    raise ValueError(f"Unsupported CLASSIFIER_BACKEND '{selected}'. Use 'keyword' or 'bayes'.")
