"""brandrag: retrieval-augmented context assembly for brand content generation."""

__version__ = "0.1.0"
