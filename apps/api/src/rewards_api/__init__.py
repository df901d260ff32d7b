"""Rewards catalog reconciliation service."""
