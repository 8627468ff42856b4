from abc import ABC, abstractmethod


class BaseTextSplitter(ABC):
    """Abstract base class for text splitters."""

    @abstractmethod
    def split_text(self, text: str) -> list[str]:
        """Split raw text into chunk strings."""
        pass
