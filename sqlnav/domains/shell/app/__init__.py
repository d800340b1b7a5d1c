"""Textual application and key bindings."""
