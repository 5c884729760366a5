"""Shared helpers for paths and logging."""
