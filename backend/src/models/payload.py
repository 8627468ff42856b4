"""Payload models shared by the codec and the retrieval engine."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

PAYLOAD_VERSION = 1


class Document(BaseModel):
    """A reference document carried inside a payload.

    Attributes:
        id: Stable identifier, used as the prefix of every chunk id.
        title: Human readable title shown next to retrieved passages.
        content: Raw document text.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    content: str


class RetrievalConfig(BaseModel):
    """Retrieval settings travelling with the corpus."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    top_k: int = Field(default=4, alias="topK")
    chunk_size: int = Field(default=800, alias="chunkSize")
    overlap: int = 120


class Payload(BaseModel):
    """Root entity: a corpus plus its configuration.

    Field declaration order is the canonical JSON order, so changing it
    changes every digest and token.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version: Literal[1] = Field(default=PAYLOAD_VERSION, alias="v")
    title: str
    system_prompt: str = Field(default="", alias="systemPrompt")
    docs: tuple[Document, ...] = ()
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)

    def to_canonical_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
