"""Backing time-series store access.

This module defines the read-only series store contract and its
in-memory and HTTP implementations used by discovery.
"""
