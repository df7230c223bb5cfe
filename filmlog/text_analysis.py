#!/usr/bin/env python3
"""Review text frequency analysis and review persona"""

import re
import unicodedata
from collections import Counter
from typing import Iterable, List, Optional, Sequence, Tuple

from filmlog.constants import (
    ANALYTICAL_WORDS, EMOTIONAL_WORDS, ESSAYIST_MIN_AVG_LENGTH, EXPRESSION_FULL_LENGTH,
    MIN_TOKEN_LENGTH, STOPWORDS, TOP_WORDS,
)
from filmlog.models import Persona, TextSummary, WordCount

URL_RE = re.compile(r'(?:https?://|www\.)\S+', re.IGNORECASE)
# Punctuation, symbols and control characters; letters, combining marks and digits stay
SEPARATOR_CATEGORIES = ('P', 'S', 'C')


def _strip_separators(text: str) -> str:
    return ''.join(' ' if unicodedata.category(ch)[0] in SEPARATOR_CATEGORIES else ch
                   for ch in text)


def tokenize(text: str, min_length: int = MIN_TOKEN_LENGTH) -> List[str]:
    """
    Lower-cased word tokens with URLs and punctuation removed

    Examples:
        >>> tokenize("Great pacing! See https://example.com/x -- 10/10")
        ['great', 'pacing', 'see', '10', '10']
    """
    text = URL_RE.sub(' ', text.lower())
    text = _strip_separators(text)
    return [t for t in text.split() if len(t) >= min_length]


def top_words(texts: Iterable[str], limit: int = TOP_WORDS,
              min_length: int = MIN_TOKEN_LENGTH) -> Tuple[WordCount, ...]:
    """Most frequent non-stopword tokens; ties keep first-encountered order"""
    counts: Counter = Counter()
    for text in texts:
        for token in tokenize(text, min_length):
            if token not in STOPWORDS:
                counts[token] += 1
    # most_common() is a stable sort, so equal counts stay in insertion order
    return tuple(WordCount(word, count) for word, count in counts.most_common(limit))


def classify_persona(avg_length: Optional[float], words: Sequence[WordCount]) -> Persona:
    vocabulary = {w.word for w in words}
    if (avg_length or 0) > ESSAYIST_MIN_AVG_LENGTH:
        return Persona('Essayist', 'Long review length and dense wording.')
    if vocabulary & EMOTIONAL_WORDS:
        return Persona('Emotional', 'Frequent emotional vocabulary in reviews.')
    if vocabulary & ANALYTICAL_WORDS:
        return Persona('Analytical', 'Craft-focused wording appears repeatedly.')
    return Persona('Minimalist', 'Short and sparse review text.')


def analyze_reviews(texts: Sequence[str], limit: int = TOP_WORDS,
                    min_length: int = MIN_TOKEN_LENGTH) -> TextSummary:
    words = top_words(texts, limit, min_length)
    avg_length = sum(len(t) for t in texts) / len(texts) if texts else None
    intensity = min(1.0, max(0.0, (avg_length or 0) / EXPRESSION_FULL_LENGTH))
    return TextSummary(
        top_words=words,
        avg_review_length=avg_length,
        expression_intensity=intensity,
        persona=classify_persona(avg_length, words),
    )
