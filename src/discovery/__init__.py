"""Inventory series discovery.

This module locates agent-published inventory series by tag and drives
snapshot reconstruction over them with per-series failure isolation.
"""
