"""Explorer widgets and formatting."""
