"""Aggregation, coordinate lookup and the report run."""
