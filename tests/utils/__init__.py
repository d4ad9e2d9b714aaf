"""Tests for cgen.utils."""
