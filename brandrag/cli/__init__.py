"""Command-line tools for operating the brand knowledge base.

- ``python -m brandrag.cli`` submits, approves, rejects and promotes
  guideline documents, lists a brand's documents, and prints the context
  block a generation request would receive.
"""
