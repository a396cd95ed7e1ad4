"""Household net-worth service: shared ownership, valuation and snapshots."""
