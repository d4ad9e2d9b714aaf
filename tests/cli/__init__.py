"""Tests for cgen.cli."""
