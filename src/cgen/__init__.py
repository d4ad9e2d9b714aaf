"""cgen - generate git commit messages from staged diffs with LLM providers."""

__version__ = "0.1.0"
__author__ = "cgen contributors"
