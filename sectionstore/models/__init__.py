"""Domain enumerations."""
