"""Shared HTTP client and HTML tag extraction."""
