"""Holdtalk - hold-to-record voice message aid."""

__version__ = "0.1.0"
