"""Application shell: app, keymap and settings."""
