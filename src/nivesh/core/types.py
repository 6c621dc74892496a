"""Shared type aliases used across nivesh."""

from decimal import Decimal

# "FROM->TO" -> rate, scoped to one calculation
RateCache = dict[str, Decimal]
