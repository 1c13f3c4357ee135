"""Shared utilities: logging setup and path constants."""
