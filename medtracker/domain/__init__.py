"""Domain models and the static medication catalog."""
