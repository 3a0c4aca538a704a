"""Rule tables, operational settings and settings loading."""
