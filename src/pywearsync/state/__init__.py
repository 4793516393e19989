"""State/store layer.

The persisted store is the single writer-owned source of truth for the last
synchronized weather snapshot. Only the sync handler writes to it.
"""
