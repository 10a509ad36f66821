"""Utility modules for pr-utils."""
