"""Document store and record loading."""
