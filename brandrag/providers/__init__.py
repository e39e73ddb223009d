"""Concrete adapters behind the brandrag interfaces."""
