from abc import ABC, abstractmethod


class BaseAnalyzer(ABC):
    """Abstract base class for text analyzers.

    An analyzer turns raw text into index terms. Implementations must be
    deterministic and free of side effects, since the same analyzer is used
    for chunks at build time and for queries at search time.
    """

    @abstractmethod
    def tokenize(self, text: str) -> list[str]:
        """Return index terms in first-occurrence order, duplicates kept."""
        pass
