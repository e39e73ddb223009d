"""Chunk Store implementations."""
