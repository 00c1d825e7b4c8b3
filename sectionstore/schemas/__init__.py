"""Domain value types."""
