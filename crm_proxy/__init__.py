"""Salesforce credential broker and duplicate-review API proxy."""

__version__ = "1.0.0"
