"""Spending analytics."""
