"""Utility modules for cross-cutting concerns."""
