"""Core workflow sequencing."""
