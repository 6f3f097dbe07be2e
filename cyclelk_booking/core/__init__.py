"""
Core domain types for the Cycle.LK booking service.
"""
