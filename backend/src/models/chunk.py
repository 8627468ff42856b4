"""Data models for indexed and retrieved chunks."""

from pydantic import BaseModel, ConfigDict, Field


class Chunk(BaseModel):
    """An indexed window of a document.

    Attributes:
        chunk_id: ``{doc_id}#{ordinal}``, unique within an index.
        doc_title: Title of the source document.
        content: The chunk text.
        tokens: Index terms in first-occurrence order, duplicates kept.
        term_frequency: Term -> occurrences in ``tokens``.
        token_count: ``len(tokens)``, the BM25 document length.
    """

    model_config = ConfigDict(frozen=True)

    chunk_id: str
    doc_title: str
    content: str
    tokens: tuple[str, ...] = ()
    term_frequency: dict[str, int] = Field(default_factory=dict)
    token_count: int = 0


class RetrievedChunk(BaseModel):
    """A chunk selected for a query, with its relevance score.

    Attributes:
        doc_title: Title of the source document.
        content: The chunk text.
        score: BM25 score plus coverage bonus, always positive.
        chunk_id: Id of the chunk inside the index, for citations.
    """

    doc_title: str
    content: str
    score: float
    chunk_id: str = ""
