"""
Ingestion — incremental sync of document sources into the vector store.

A source (e.g. a directory of PDFs) reports new, modified and deleted
documents; the :class:`~ragdoc.ingestion.ingestor.DataIngestor` turns
that diff into deletes and upserts of document and chunk records.
"""
