"""
Routes Module
"""
from .pages import router as pages_router
from .regions import router as regions_router
from .subregions import router as subregions_router
from .intermediate_regions import router as intermediate_regions_router
from .reports import router as reports_router

__all__ = [
    "pages_router",
    "regions_router",
    "subregions_router",
    "intermediate_regions_router",
    "reports_router",
]
