from .base import BaseTextSplitter
from .window import WindowTextSplitter, split_into_chunks

__all__ = ["BaseTextSplitter", "WindowTextSplitter", "split_into_chunks"]
