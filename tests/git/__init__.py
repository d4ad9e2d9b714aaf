"""Tests for cgen.git."""
