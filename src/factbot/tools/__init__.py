"""Maintenance tools for factbot."""
