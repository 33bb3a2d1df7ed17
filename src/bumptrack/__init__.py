"""Kick and contraction counters for a remote pregnancy-tracking API."""

__version__ = "0.1.0"
