"""Aggregations over fund snapshots."""
