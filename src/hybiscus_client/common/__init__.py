"""Shared error types and logging helpers."""
