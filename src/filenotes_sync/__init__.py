"""Bidirectional replication of a flat notes directory with a cloud folder."""

__version__ = "0.1.0"
