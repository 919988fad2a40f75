"""Infrastructure concerns (logging)."""
