"""Code shared across domains."""
