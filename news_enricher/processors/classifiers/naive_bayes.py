from __future__ import annotations

import math
import re
import threading
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from ...utils.logging import get_logger
from .base import (
    ClassificationResult,
    Classifier,
    ClassifierNotTrainedError,
    TrainingError,
    clamp_confidence,
)

logger = get_logger("enricher.classifiers.naive_bayes")

_non_word_re = re.compile(r"[^\w\s]")
_whitespace_re = re.compile(r"\s+")

MIN_TOKEN_LENGTH = 3


def preprocess(text: str) -> List[str]:
    """Lower-case, drop punctuation and keep tokens of three or more characters."""
    cleaned = _non_word_re.sub(" ", (text or "").lower())
    cleaned = _whitespace_re.sub(" ", cleaned).strip()
    if not cleaned:
        return []
    return [w for w in cleaned.split(" ") if len(w) >= MIN_TOKEN_LENGTH]


@dataclass(frozen=True)
class BayesModel:
    """Immutable snapshot of a trained model."""

    doc_counts: Mapping[str, int]
    priors: Mapping[str, float]
    word_counts: Mapping[str, Mapping[str, int]]
    token_totals: Mapping[str, int]
    vocabulary: FrozenSet[str]
    total_documents: int

    @property
    def categories(self) -> List[str]:
        return list(self.priors)


@dataclass(frozen=True, slots=True)
class TrainingReport:
    documents: int
    skipped: int
    categories: Tuple[str, ...]
    vocabulary_size: int


def _valid_row(row: Any) -> Optional[Tuple[str, str]]:
    try:
        category, text = row
    except (TypeError, ValueError):
        return None
    if not isinstance(category, str) or not isinstance(text, str):
        return None
    category, text = category.strip(), text.strip()
    if not category or not text:
        return None
    return category, text


def build_model(corpus: Iterable[Tuple[str, str]]) -> Tuple[BayesModel, int]:
    """Build a model from ``(category, text)`` pairs.

    Returns the model and the number of rows skipped as malformed.
    Raises ``TrainingError`` when no valid row remains.
    """
    doc_counts: Counter[str] = Counter()
    word_counts: Dict[str, Counter[str]] = {}
    vocabulary: set[str] = set()
    skipped = 0

    for row in corpus:
        valid = _valid_row(row)
        if valid is None:
            skipped += 1
            continue
        category, text = valid
        doc_counts[category] += 1
        tokens = preprocess(text)
        word_counts.setdefault(category, Counter()).update(tokens)
        vocabulary.update(tokens)

    total = sum(doc_counts.values())
    if total == 0:
        raise TrainingError(f"Training corpus has no valid rows ({skipped} skipped)")

    model = BayesModel(
        doc_counts=MappingProxyType(dict(doc_counts)),
        priors=MappingProxyType({c: n / total for c, n in doc_counts.items()}),
        word_counts=MappingProxyType({c: MappingProxyType(dict(wc)) for c, wc in word_counts.items()}),
        token_totals=MappingProxyType({c: sum(wc.values()) for c, wc in word_counts.items()}),
        vocabulary=frozenset(vocabulary),
        total_documents=total,
    )
    return model, skipped


class NaiveBayesClassifier(Classifier):
    """Multinomial Naive Bayes with add-one (Laplace) smoothing.

    ``train`` builds a complete new model before publishing it with a
    single attribute assignment, so concurrent ``classify`` calls see
    either the old model or the new one, never a mix.
    """

    kind = "bayes"

    def __init__(self) -> None:
        self._model: Optional[BayesModel] = None
        self._train_lock = threading.Lock()

    @property
    def is_trained(self) -> bool:
        return self._model is not None

    @property
    def categories(self) -> List[str]:
        model = self._model
        return model.categories if model else []

    def train(self, corpus: Iterable[Tuple[str, str]]) -> TrainingReport:
        with self._train_lock:
            model, skipped = build_model(corpus)
            self._model = model
        if skipped:
            logger.warning("Skipped %d malformed training rows", skipped)
        logger.info(
            "Trained Naive Bayes on %d documents: categories=%s vocabulary=%d",
            model.total_documents,
            ", ".join(model.categories),
            len(model.vocabulary),
        )
        for category, count in model.doc_counts.items():
            logger.debug("  %s: %d documents", category, count)
        return TrainingReport(
            documents=model.total_documents,
            skipped=skipped,
            categories=tuple(model.categories),
            vocabulary_size=len(model.vocabulary),
        )

    def classify(self, text: str) -> ClassificationResult:
        model = self._model
        if model is None:
            raise ClassifierNotTrainedError("Naive Bayes classifier must be trained before classifying")

        words = preprocess(text)
        vocabulary_size = len(model.vocabulary)
        scores: Dict[str, float] = {}
        for category, prior in model.priors.items():
            counts = model.word_counts.get(category, {})
            # A corpus of nothing but short tokens leaves an empty vocabulary
            denominator = max(model.token_totals.get(category, 0) + vocabulary_size, 1)
            score = math.log(prior)
            for word in words:
                score += math.log((counts.get(word, 0) + 1) / denominator)
            scores[category] = score

        best_category = max(scores, key=scores.__getitem__)
        ranked = sorted(scores.values(), reverse=True)
        if len(ranked) < 2:
            confidence = 1.0
        elif ranked[0] == 0:
            confidence = 1.0 if ranked[0] > ranked[1] else 0.0
        else:
            confidence = (ranked[0] - ranked[1]) / abs(ranked[0])

        return ClassificationResult(
            category=best_category,
            confidence=clamp_confidence(confidence),
            explanation=f"Naive Bayes classification over {len(words)} words",
            scores=scores,
        )

    def stats(self) -> Dict[str, Any]:
        model = self._model
        if model is None:
            return {"trained": False, "method": "naive_bayes", "categories": []}
        return {
            "trained": True,
            "method": "naive_bayes",
            "categories": model.categories,
            "vocabularySize": len(model.vocabulary),
            "totalDocuments": model.total_documents,
            "categoryDistribution": dict(model.doc_counts),
        }
