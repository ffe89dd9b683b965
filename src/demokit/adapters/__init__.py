"""Adapters binding the import pipeline ports to remote services."""
