"""
Partner directory module.
"""

from .service import PartnerDirectory, ADDRESS_NOT_AVAILABLE

__all__ = ["PartnerDirectory", "ADDRESS_NOT_AVAILABLE"]
