"""LLM completion provider adapters (Gemini over httpx, OpenAI-compatible)."""
