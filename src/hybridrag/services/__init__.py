"""
Domain services for HybridRAG.

- embeddings: tokenization, transformer inference and hash fallback vectors
- vector_storage: vector stores with exact cosine search
- retrieval: hybrid vector/lexical retrieval orchestration
"""
