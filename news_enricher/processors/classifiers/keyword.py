from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from ...utils.logging import get_logger
from .base import ClassificationResult, Classifier, clamp_confidence

logger = get_logger("enricher.classifiers.keyword")

DEFAULT_KEYWORDS: Dict[str, List[str]] = {
    "business": [
        "business", "economy", "finance", "market", "stock", "company", "investment", "trade",
        "economic", "financial", "bank", "banking", "money", "profit", "revenue", "earnings",
        "quarterly", "annual", "report", "ceo", "executive", "board", "shareholder", "dividend",
        "merger", "acquisition", "ipo", "startup", "venture", "capital",
    ],
    "entertainment": [
        "entertainment", "movie", "film", "music", "celebrity", "actor", "singer", "show",
        "concert", "performance", "album", "song", "hit", "chart", "award", "oscar", "grammy",
        "emmy", "hollywood", "netflix", "streaming", "tv", "television", "series", "episode",
        "season", "premiere", "release", "trailer", "review",
    ],
    "politics": [
        "politics", "political", "government", "election", "president", "minister", "parliament",
        "vote", "democrat", "republican", "campaign", "policy", "law", "bill", "congress", "senate",
        "house", "representative", "senator", "mayor", "governor", "cabinet", "administration",
        "foreign", "diplomacy", "treaty", "agreement", "politique", "gouvernement", "élection",
        "président", "ministre", "parlement", "démocrate", "républicain", "campagne", "loi",
        "projet", "congrès", "sénat", "maire", "gouverneur", "étranger", "diplomatie", "traité",
        "accord", "parti", "opposition", "majorité", "minorité", "coalition", "alliance",
        "candidat", "candidate", "électeur", "électrice", "scrutin", "ballot", "referendum",
        "référendum", "constitution", "amendement", "budget", "déficit", "dette", "impôt", "tax",
        "débat", "discussion", "abstention", "participation", "résultat", "victoire", "défaite",
        "state", "federal", "local", "national", "international", "european", "american",
        "french", "british", "german", "italian", "spanish", "russian", "chinese", "japanese",
        "canadian", "australian", "indian", "brazilian", "mexican", "african", "asian",
        "middle east", "nato", "un", "united nations", "eu", "european union", "brexit", "trump",
        "biden", "macron", "merkel", "johnson", "putin", "xi", "modi", "bolsonaro",
        "lopez obrador",
    ],
    "sports": [
        "sport", "football", "basketball", "tennis", "olympics", "championship", "match", "game",
        "player", "team", "league", "tournament", "coach", "athlete", "soccer", "baseball",
        "hockey", "golf", "swimming", "running", "marathon", "race", "competition", "win",
        "victory", "defeat", "score", "goal", "point", "medal", "gold", "silver", "bronze",
    ],
    "technology": [
        "tech", "technology", "ai", "artificial intelligence", "software", "app", "digital",
        "computer", "internet", "cyber", "data", "algorithm", "machine learning", "blockchain",
        "crypto", "startup", "innovation", "programming", "code", "developer", "coding",
        "hardware", "gadget", "device", "smartphone", "laptop", "server", "cloud", "database",
        "api", "web", "mobile", "application",
    ],
}

DEFAULT_CATEGORY = "business"

# Score at which confidence saturates to 1.0
_SATURATION_HITS = 3
_NO_SIGNAL_CONFIDENCE = 0.1


class KeywordClassifier(Classifier):
    """Zero-training classifier that counts keyword hits per category.

    A token counts for a category when it *contains* one of the
    category's keywords, so "winning" hits "win" but "cart" also hits
    "art". Multi-word keywords never match a single whitespace token.
    """

    kind = "keyword"

    def __init__(
        self,
        keywords: Optional[Mapping[str, Sequence[str]]] = None,
        *,
        default_category: Optional[str] = None,
    ) -> None:
        table = keywords if keywords else DEFAULT_KEYWORDS
        self.keywords: Dict[str, List[str]] = {
            category: [k.lower() for k in words] for category, words in table.items()
        }
        if default_category is None:
            default_category = DEFAULT_CATEGORY if DEFAULT_CATEGORY in self.keywords else next(iter(self.keywords))
        if default_category not in self.keywords:
            raise ValueError(f"Default category '{default_category}' is not one of {sorted(self.keywords)}")
        self.default_category = default_category

    @property
    def is_trained(self) -> bool:
        return True

    @property
    def categories(self) -> List[str]:
        return list(self.keywords)

    def classify(self, text: str) -> ClassificationResult:
        words = (text or "").lower().split()
        scores: Dict[str, float] = {}
        for category, keywords in self.keywords.items():
            scores[category] = float(sum(1 for word in words if any(k in word for k in keywords)))

        best_category = self.default_category
        best_score = 0.0
        for category, score in scores.items():
            if score > best_score:
                best_category, best_score = category, score

        if best_score > 0:
            confidence = clamp_confidence(best_score / _SATURATION_HITS)
        else:
            confidence = _NO_SIGNAL_CONFIDENCE
        return ClassificationResult(
            category=best_category,
            confidence=confidence,
            explanation=f"Keyword classification: {int(best_score)} keyword hits",
            scores=scores,
        )

    def stats(self) -> Dict[str, Any]:
        return {
            "trained": True,
            "method": "keyword",
            "categories": self.categories,
            "totalKeywords": sum(len(words) for words in self.keywords.values()),
        }
