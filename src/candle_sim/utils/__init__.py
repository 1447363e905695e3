"""Logging and money helpers."""
