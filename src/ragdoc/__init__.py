"""
ragdoc — incremental PDF ingestion and semantic search over a vector store.

Subpackages
-----------
- :mod:`ragdoc.ingestion` — sources, layout-aware chunking, sync passes.
- :mod:`ragdoc.retrieval` — vector-collection abstraction and search.
"""

__version__ = "0.1.0"
