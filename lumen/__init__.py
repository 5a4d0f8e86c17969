"""Lumen application launcher: search and smart content."""

__version__ = "0.1.0"
