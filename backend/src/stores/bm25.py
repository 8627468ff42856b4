import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from analyzers import BaseAnalyzer, EnglishAnalyzer
from models.chunk import Chunk, RetrievedChunk
from models.payload import Payload
from splitters import BaseTextSplitter, WindowTextSplitter
from .base import BaseChunkIndex

logger = logging.getLogger(__name__)

# BM25 parameters
K1 = 1.2
B = 0.75

# Weight of the fraction of distinct query terms a chunk matches.
COVERAGE_BONUS = 0.15


def compute_idf(document_frequency: int, total_chunks: int) -> float:
    """BM25 IDF with the +1 smoothing, always positive."""
    return math.log(
        1 + (total_chunks - document_frequency + 0.5) / (document_frequency + 0.5)
    )


@dataclass(frozen=True)
class BM25Index(BaseChunkIndex):
    """Lexical index over the chunks of one payload.

    Attributes:
        chunks: Chunks in document order, then chunk ordinal.
        top_k: Default result count taken from the payload.
        avg_chunk_length: Mean chunk token count, 1.0 for an empty index.
        idf_by_token: Term -> inverse document frequency over all chunks.
        analyzer: Analyzer used for chunks, reused for queries.
    """

    chunks: tuple[Chunk, ...]
    top_k: int
    avg_chunk_length: float
    idf_by_token: dict[str, float]
    analyzer: BaseAnalyzer = field(default_factory=EnglishAnalyzer, compare=False)

    @classmethod
    def from_payload(
        cls,
        payload: Payload,
        analyzer: Optional[BaseAnalyzer] = None,
        splitter: Optional[BaseTextSplitter] = None,
    ) -> "BM25Index":
        """Chunk, tokenize and score every document of ``payload``.

        The splitter defaults to a sliding window sized by the payload's
        retrieval settings.
        """
        analyzer = analyzer or EnglishAnalyzer()
        retrieval = payload.retrieval
        splitter = splitter or WindowTextSplitter(
            chunk_size=retrieval.chunk_size, chunk_overlap=retrieval.overlap
        )
        chunks: list[Chunk] = []

        for doc in payload.docs:
            parts = splitter.split_text(doc.content)
            for ordinal, part in enumerate(parts):
                tokens = analyzer.tokenize(part)
                chunks.append(
                    Chunk(
                        chunk_id=f"{doc.id}#{ordinal}",
                        doc_title=doc.title,
                        content=part,
                        tokens=tuple(tokens),
                        term_frequency=dict(Counter(tokens)),
                        token_count=len(tokens),
                    )
                )

        document_frequency: Counter[str] = Counter()
        for chunk in chunks:
            document_frequency.update(chunk.term_frequency.keys())

        total = len(chunks)
        idf_by_token = {
            term: compute_idf(df, total) for term, df in document_frequency.items()
        }
        avg_chunk_length = (
            sum(chunk.token_count for chunk in chunks) / total if total else 1.0
        )

        logger.info(
            f"Indexed {len(payload.docs)} documents into {total} chunks "
            f"({len(idf_by_token)} distinct terms)"
        )
        return cls(
            chunks=tuple(chunks),
            top_k=retrieval.top_k,
            avg_chunk_length=avg_chunk_length,
            idf_by_token=idf_by_token,
            analyzer=analyzer,
        )

    def idf(self, term: str) -> float:
        return self.idf_by_token.get(term, 0.0)

    def score(self, chunk: Chunk, query_frequency: Counter) -> float:
        """BM25 score of ``chunk`` plus the query coverage bonus."""
        score = 0.0
        matched = 0
        # avg_chunk_length is 0 when every chunk tokenized to nothing.
        avg_length = self.avg_chunk_length or 1.0
        length_norm = 1 - B + B * chunk.token_count / avg_length

        for term, qf in query_frequency.items():
            tf = chunk.term_frequency.get(term)
            if not tf:
                continue
            matched += 1
            score += self.idf(term) * (tf * (K1 + 1)) / (tf + K1 * length_norm) * qf

        if matched:
            score += COVERAGE_BONUS * (matched / len(query_frequency))
        return score

    def search(self, query: str, k: Optional[int] = None) -> list[RetrievedChunk]:
        k = self.top_k if k is None else k
        query_terms = self.analyzer.tokenize(query)
        if not query_terms or not self.chunks or k <= 0:
            return []

        query_frequency = Counter(query_terms)
        scored = []
        for chunk in self.chunks:
            score = self.score(chunk, query_frequency)
            if score > 0:
                scored.append((score, chunk))

        # sorted() is stable: equal scores keep document/ordinal order.
        scored = sorted(scored, key=lambda item: -item[0])[:k]

        logger.debug(f"Query {query[:50]!r} matched {len(scored)} chunks")
        return [
            RetrievedChunk(
                doc_title=chunk.doc_title,
                content=chunk.content,
                score=score,
                chunk_id=chunk.chunk_id,
            )
            for score, chunk in scored
        ]


def build_index(
    payload: Payload,
    analyzer: Optional[BaseAnalyzer] = None,
    splitter: Optional[BaseTextSplitter] = None,
) -> BM25Index:
    """Build a fresh BM25 index for ``payload``."""
    return BM25Index.from_payload(payload, analyzer=analyzer, splitter=splitter)


def retrieve_top_chunks(
    index: BaseChunkIndex, query: str, top_k: Optional[int] = None
) -> list[RetrievedChunk]:
    """Rank the chunks of ``index`` against ``query``.

    Returns an empty list for queries without index terms or an empty index.
    """
    return index.search(query, k=top_k)
