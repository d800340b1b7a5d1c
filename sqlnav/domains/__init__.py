"""Feature domains of the sqlnav app."""
