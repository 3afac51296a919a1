"""Geotagged photo map service."""

__version__ = "0.1.0"
