"""Usage table loading."""
