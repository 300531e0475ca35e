"""
Hybrid retrieval service for HybridRAG.

Orchestrates chunking, embedding and vector storage on ingestion, and
vector search with lexical re-ranking on query. Tracks query metrics and
optionally records each user's queries.
"""

import asyncio
import uuid
from pathlib import Path
from typing import List, Optional, Union

from ...shared import (
    MetricsCollector,
    Settings,
    get_logger,
    get_settings,
    timed_operation,
)
from ...shared.exceptions import ConfigurationError, ValidationError
from ..embeddings import EmbeddingProvider, TokenDebugInfo, TransformerEmbeddingProvider
from ..vector_storage import InMemoryVectorStore, VectorDocument, VectorStore
from .chunker import SimpleChunker
from .lexical import LexicalReranker
from .memory import InMemoryConversationMemory
from .models import ConversationTurn, QueryResult, RagStats

TOTAL_QUERIES = "rag_total_queries"
CACHE_HITS = "rag_cache_hits"
RETRIEVAL_MISSES = "rag_retrieval_misses"

# Over-fetch floor in hybrid mode; lexically strong but vector-weak
# candidates must survive the first pass.
HYBRID_VECTOR_FLOOR = 0.15
FINAL_SCORE_FACTOR = 0.5

INGESTIBLE_SUFFIXES = (".txt", ".md", ".markdown")


class HybridRetrievalService:
    """
    Main retrieval service.

    All collaborators are injectable; anything omitted is built from
    settings. Embedding and search run in worker threads so the event loop
    stays responsive.
    """

    def __init__(self,
                 settings: Optional[Settings] = None,
                 embedding_provider: Optional[EmbeddingProvider] = None,
                 vector_store: Optional[VectorStore] = None,
                 chunker: Optional[SimpleChunker] = None,
                 memory: Optional[InMemoryConversationMemory] = None,
                 metrics: Optional[MetricsCollector] = None):
        self.settings = settings or get_settings()
        self.logger = get_logger(__name__)

        self.embedding_provider = embedding_provider or TransformerEmbeddingProvider(self.settings)
        self.vector_store = vector_store if vector_store is not None else InMemoryVectorStore()
        self.chunker = chunker or SimpleChunker(self.settings.max_chunk_chars)
        self.memory = memory or InMemoryConversationMemory(self.settings.conversation_history_size)
        self.metrics = metrics or MetricsCollector()

        self.reranker = LexicalReranker(
            per_token_boost=self.settings.lexical_per_token_boost,
            exact_boost=self.settings.lexical_exact_boost,
            no_overlap_penalty=self.settings.no_lexical_penalty,
        )

        self.logger.info(f"Hybrid retrieval service initialized: {self.settings.retrieval_config}")

    # === Ingestion ===

    @timed_operation("rag_ingest_duration")
    async def ingest(self, content: str, external_id: Optional[str] = None) -> List[str]:
        """
        Chunk, embed and store content.

        Every chunk gets a fresh id suffix, so repeated ingests under the
        same external id never overwrite each other.

        Args:
            content: Text to ingest
            external_id: Caller id used as the chunk id prefix

        Returns:
            Ids of the stored chunks
        """
        if content is None:
            raise ValidationError("content must not be None")

        base_id = external_id or uuid.uuid4().hex
        chunk_ids = []

        for chunk in self.chunker.chunk(content):
            embedding = await asyncio.to_thread(self.embedding_provider.embed, chunk)
            chunk_id = f"{base_id}:{uuid.uuid4().hex}"
            self.vector_store.upsert(VectorDocument(id=chunk_id, content=chunk, embedding=embedding))
            chunk_ids.append(chunk_id)

        self.logger.info(f"Ingested {len(chunk_ids)} chunks for {base_id}")
        return chunk_ids

    async def bulk_ingest_directory(self, directory: Union[str, Path]) -> int:
        """
        Ingest every text and markdown file directly inside a directory.

        Files that cannot be read are logged and skipped.

        Returns:
            Number of files ingested
        """
        if not directory:
            return 0

        path = Path(directory)
        if not path.is_dir():
            self.logger.warning(f"Directory not found, nothing ingested: {path}")
            return 0

        files = sorted(
            item for item in path.iterdir()
            if item.is_file() and item.suffix.lower() in INGESTIBLE_SUFFIXES
        )

        ingested = 0
        for file_path in files:
            try:
                content = await asyncio.to_thread(file_path.read_text, encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                self.logger.warning(f"Skipping unreadable file {file_path}: {e}")
                continue

            await self.ingest(content, external_id=file_path.name)
            ingested += 1

        self.logger.info(f"Bulk ingested {ingested} of {len(files)} files from {path}")
        return ingested

    # === Query ===

    @timed_operation("rag_query_duration")
    async def query(self, user_id: str, query_text: str) -> QueryResult:
        """
        Retrieve chunks relevant to a query.

        Args:
            user_id: User issuing the query
            query_text: Query text

        Returns:
            QueryResult with ranked chunks and the embedding cache flag
        """
        if user_id is None or query_text is None:
            raise ValidationError("user_id and query_text are required")

        self.metrics.counter(TOTAL_QUERIES)

        embedding, cached = await asyncio.to_thread(
            self.embedding_provider.embed_with_cache_info, query_text
        )
        if cached:
            self.metrics.counter(CACHE_HITS)

        settings = self.settings
        if settings.enable_hybrid:
            candidates = await asyncio.to_thread(
                self.vector_store.search,
                embedding,
                settings.max_retrieve * settings.hybrid_candidate_multiplier,
                min(settings.similarity_threshold, HYBRID_VECTOR_FLOOR),
            )
            results = await asyncio.to_thread(
                self.reranker.rerank,
                query_text,
                candidates,
                settings.max_retrieve,
                settings.similarity_threshold * FINAL_SCORE_FACTOR,
            )
        else:
            results = await asyncio.to_thread(
                self.vector_store.search,
                embedding,
                settings.max_retrieve,
                settings.similarity_threshold,
            )

        if not results:
            self.metrics.counter(RETRIEVAL_MISSES)

        if settings.enable_conversation_memory:
            self.memory.append(user_id, "user", query_text)

        self.logger.debug(f"Query for {user_id} returned {len(results)} chunks (cached={cached})")
        return QueryResult(results=results, cached=cached)

    # === Inspection ===

    def get_stats(self) -> RagStats:
        """Atomic snapshot of the query counters."""
        counters = self.metrics.snapshot_counters([TOTAL_QUERIES, CACHE_HITS, RETRIEVAL_MISSES])
        return RagStats(
            total_queries=counters[TOTAL_QUERIES],
            cache_hits=counters[CACHE_HITS],
            retrieval_misses=counters[RETRIEVAL_MISSES],
        )

    def debug_tokenize(self, text: str, max_tokens: int = 128) -> TokenDebugInfo:
        """Tokenization details for a text, as the embedding provider sees it."""
        tokenizer = self.embedding_provider.tokenizer
        if tokenizer is None:
            raise ConfigurationError("Embedding provider has no tokenizer")
        return tokenizer.debug_tokenize(text, max_tokens)

    def get_history(self, user_id: str, limit: int = 10) -> List[ConversationTurn]:
        """Most recent recorded queries for a user, oldest first."""
        return self.memory.get_history(user_id, limit)
