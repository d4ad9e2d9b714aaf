"""Tests for cgen.presets."""
