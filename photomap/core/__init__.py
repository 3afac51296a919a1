"""Core configuration, errors, logging and identity."""
