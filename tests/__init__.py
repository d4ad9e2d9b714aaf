"""Test suite for cgen."""
