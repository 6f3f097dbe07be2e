"""
Service layer for the Cycle.LK booking service.
"""

from .booking import BookingGateway, BookingWizard, StepController
from .catalog import CatalogService
from .partners import PartnerDirectory
from .external import ExternalAPIService
from .sessions import WizardSessionStore

__all__ = [
    "BookingGateway",
    "BookingWizard",
    "StepController",
    "CatalogService",
    "PartnerDirectory",
    "ExternalAPIService",
    "WizardSessionStore",
]
