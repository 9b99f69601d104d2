"""Fulfillment & allocation engine for a multi-brand warehouse."""

__version__ = "1.0.0"
