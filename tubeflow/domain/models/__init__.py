"""Value objects shared across the request layer."""
