"""Table validation helpers."""
