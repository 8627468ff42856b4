import re
from collections import deque
from typing import Iterable, Optional

from .base import BaseAnalyzer

# \w covers Unicode letters and digits plus "_", so non-Latin scripts
# survive as terms.
TOKEN_RE = re.compile(r"[\w\-]+")

STOPWORDS = frozenset(
    {
        "the",
        "and",
        "for",
        "are",
        "that",
        "this",
        "from",
        "with",
        "have",
        "your",
        "what",
        "when",
        "where",
        "which",
        "will",
        "would",
        "about",
        "into",
        "then",
        "than",
        "there",
        "they",
        "them",
        "you",
        "how",
        "can",
        "use",
        "using",
        "used",
        "been",
        "also",
        "was",
        "were",
        "has",
        "had",
        "our",
    }
)

# Longest first so "ingly" is tried before "ly".
STEM_SUFFIXES = ("ingly", "edly", "ing", "ed", "ies", "es", "ly", "s")


class EnglishAnalyzer(BaseAnalyzer):
    """Lowercasing analyzer with stopword removal and suffix-variant expansion.

    Each raw term is expanded into itself plus every stem reachable by
    repeatedly stripping a known suffix, so "deploying" also indexes
    "deploy". The same expansion runs on chunks and on queries.
    """

    def __init__(
        self,
        stopwords: Optional[Iterable[str]] = None,
        suffixes: Optional[Iterable[str]] = None,
        min_term_length: int = 2,
    ):
        self.stopwords = frozenset(STOPWORDS if stopwords is None else stopwords)
        self.suffixes = tuple(STEM_SUFFIXES if suffixes is None else suffixes)
        self.min_term_length = min_term_length

    def expand(self, term: str) -> list[str]:
        """Return ``term`` followed by its suffix-stripped variants, breadth first."""
        if len(term) <= 2:
            return [term]

        variants = [term]
        seen = {term}
        queue = deque([term])

        while queue:
            current = queue.popleft()
            for suffix in self.suffixes:
                if not current.endswith(suffix):
                    continue
                if len(current) <= len(suffix) + 2:
                    continue

                stem = current[: -len(suffix)]
                if suffix == "ies":
                    stem += "y"
                if len(stem) <= 2 or stem in seen:
                    continue

                seen.add(stem)
                variants.append(stem)
                queue.append(stem)

        return variants

    def tokenize(self, text: str) -> list[str]:
        if not text:
            return []

        terms = []
        for raw in TOKEN_RE.findall(text.lower()):
            for variant in self.expand(raw):
                if len(variant) < self.min_term_length or variant in self.stopwords:
                    continue
                terms.append(variant)
        return terms
