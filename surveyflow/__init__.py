"""Branching survey flow, answer encoding and response aggregation."""

__version__ = "0.1.0"
