"""Abstract provider interfaces for the RAG core."""
