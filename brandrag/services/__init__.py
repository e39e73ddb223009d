"""RAG core services: chunking, embedding, ingestion, retrieval, assembly, generation."""
