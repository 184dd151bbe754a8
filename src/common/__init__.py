"""Shared helpers: logging, caching."""
