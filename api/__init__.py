"""API modules for HTTP interface."""
