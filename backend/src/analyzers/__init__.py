from .base import BaseAnalyzer
from .english import STOPWORDS, EnglishAnalyzer

_default_analyzer = EnglishAnalyzer()


def tokenize(text: str) -> list[str]:
    """Tokenize ``text`` with the default English analyzer."""
    return _default_analyzer.tokenize(text)


__all__ = ["BaseAnalyzer", "EnglishAnalyzer", "STOPWORDS", "tokenize"]
