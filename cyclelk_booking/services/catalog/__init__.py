"""
Catalog service module.
"""

from .service import CatalogService

__all__ = ["CatalogService"]
