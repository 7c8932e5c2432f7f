"""
Ingestion — fetching, chunking, and embedding manuals into the vector store.

This module is responsible for the pipeline that converts a manual URL
(PDF or web page) into embedded chunks stored in a vector database.
"""

from manual_rag.ingestion.chunker import chunk_text, normalize_text
from manual_rag.ingestion.orchestrator import IngestionOrchestrator, validate_url

__all__ = ["IngestionOrchestrator", "chunk_text", "normalize_text", "validate_url"]
