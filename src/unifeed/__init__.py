"""Unifeed — multi-source feed aggregation with seen-state tracking."""
