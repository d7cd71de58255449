"""Subscription data sources.

This package reads account dumps and serves accounts, bundle timelines,
and audit data through the subscription source port.
"""
