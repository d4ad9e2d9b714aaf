"""Utility modules for cgen."""
