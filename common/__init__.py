"""Shared helpers: secrets lookup and logging setup."""
