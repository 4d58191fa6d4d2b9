"""Reshape a source spreadsheet into a template-based output with declarative copy profiles."""

__version__ = "1.0.0"
