"""Tests for cgen.config."""
