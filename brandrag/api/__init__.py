"""FastAPI HTTP surface: routes, schemas and middleware."""
