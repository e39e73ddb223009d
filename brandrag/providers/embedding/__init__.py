"""Embedding provider adapters.

- **GeminiEmbeddingProvider** -- Gemini REST API via httpx (``embedding-001``).
- **OpenAIEmbeddingProvider** -- OpenAI-compatible embeddings via the openai SDK.
"""
