"""Hierarchical workspace and access-control service for shared notes."""

__version__ = "0.1.0"
