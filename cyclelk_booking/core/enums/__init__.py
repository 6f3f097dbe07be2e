"""
Enums for the Cycle.LK booking service.
"""

from .booking import WizardStep, DisplayState, BikeSort

__all__ = [
    "WizardStep",
    "DisplayState",
    "BikeSort",
]
