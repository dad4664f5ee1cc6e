"""Shared utilities for the receipt tracker functions."""
