"""Inventory snapshot reconstruction.

This module rebuilds chunked, compressed agent snapshots and extracts
metric type and metric blueprints from the reconstructed documents.
"""
