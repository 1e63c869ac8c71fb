"""
Database Module
"""
from .connection import QueryGateway, create_engine_from_settings
from .models import Base, Country, DaddRecord, IntermediateRegion, Region, SubRegion

__all__ = [
    "QueryGateway",
    "create_engine_from_settings",
    "Base",
    "Country",
    "DaddRecord",
    "IntermediateRegion",
    "Region",
    "SubRegion",
]
