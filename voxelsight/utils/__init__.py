"""Shared helpers: logging setup and vector math."""
