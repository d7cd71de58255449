"""Account-level transition analytics.

This package aggregates per-bundle transition streams for an account
and renders them for downstream consumers.
"""
