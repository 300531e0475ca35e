"""
Hybrid retrieval for HybridRAG.

Ingestion (chunk, embed, store) and querying (embed, vector search,
lexical re-rank), with query metrics and per-user conversation history.
"""

from .chunker import SimpleChunker
from .lexical import LexicalReranker, extract_lexical_tokens
from .memory import InMemoryConversationMemory
from .models import ConversationTurn, QueryResult, RagStats
from .service import HybridRetrievalService

__all__ = [
    'HybridRetrievalService',
    'SimpleChunker',
    'LexicalReranker',
    'extract_lexical_tokens',
    'InMemoryConversationMemory',
    'ConversationTurn',
    'QueryResult',
    'RagStats',
]
