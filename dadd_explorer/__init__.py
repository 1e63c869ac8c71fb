"""
DADD Explorer

Server-rendered CRUD and reporting application over the region hierarchy
and per-decade DADD records.
"""

__version__ = "1.0.0"
