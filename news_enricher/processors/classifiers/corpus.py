from __future__ import annotations

import csv
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

from ...utils.logging import get_logger
from .base import TrainingError

logger = get_logger("enricher.classifiers.corpus")


@dataclass(slots=True)
class TrainingCorpus:
    rows: List[Tuple[str, str]] = field(default_factory=list)
    skipped: int = 0


def read_training_csv(path: Path | str) -> TrainingCorpus:
    """Read a ``category,text`` CSV (first line is a header).

    Unquoted commas inside the text column are kept by re-joining any
    extra columns. Blank lines are ignored; rows missing a category or a
    text are counted in ``skipped``.
    """
    csv_path = Path(path)
    corpus = TrainingCorpus()
    try:
        with csv_path.open("r", encoding="utf-8", newline="") as f:
            reader = csv.reader(f)
            next(reader, None)
            for values in reader:
                if not values or not any(v.strip() for v in values):
                    continue
                if len(values) < 2:
                    corpus.skipped += 1
                    continue
                category = values[0].strip()
                text = ",".join(values[1:]).strip()
                if not category or not text:
                    corpus.skipped += 1
                    continue
                corpus.rows.append((category, text))
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise TrainingError(f"Cannot read training data from {csv_path}: {exc}") from exc

    logger.info("Loaded %d training rows from %s (%d skipped)", len(corpus.rows), csv_path, corpus.skipped)
    return corpus
