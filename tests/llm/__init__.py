"""Tests for cgen.llm."""
