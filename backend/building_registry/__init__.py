"""Building registry service."""
