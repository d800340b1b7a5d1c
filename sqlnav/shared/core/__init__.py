"""Core helpers: file stores and logging."""
