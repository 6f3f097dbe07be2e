"""
Cycle.LK booking service: the five-step bike rental booking wizard.
"""

__version__ = "1.0.0"
