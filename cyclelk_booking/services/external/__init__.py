"""
External API service module.
"""

from .service import ExternalAPIService

__all__ = ["ExternalAPIService"]
