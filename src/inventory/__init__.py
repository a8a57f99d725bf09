"""In-memory inventory index.

This module stores resources, metrics, and resource types and serves
read queries and cycle-guarded subtree walks over them.
"""
