"""Shared-line lead time risk simulation."""

__version__ = "0.1.0"
