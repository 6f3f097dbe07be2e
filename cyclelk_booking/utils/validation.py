"""
Validation utilities for booking wizard input.
"""

from datetime import datetime
from typing import List, Optional

from ..core.models.booking import RentalPeriod, WizardState
from ..core.models.catalog import BikeFilters
from ..core.models.user import User
from .date import DEFAULT_END_TIME, DEFAULT_START_TIME, DateTimeUtils, compose_instant


class ValidationUtils:
    """Validation utilities for the booking wizard forms."""

    @staticmethod
    def validate_rental_period(
        period: RentalPeriod,
        now: Optional[datetime] = None,
    ) -> List[str]:
        """
        Validate a rental period as the period selection form does.

        Args:
            period: Rental period to validate
            now: Reference time; defaults to now in the rental timezone

        Returns:
            List of validation error messages
        """
        if not period.start_date or not period.end_date:
            return ["Please select both start and end dates"]

        try:
            start = compose_instant(period.start_date, period.start_time, DEFAULT_START_TIME)
            end = compose_instant(period.end_date, period.end_time, DEFAULT_END_TIME)
        except ValueError:
            return ["Dates must be YYYY-MM-DD and times HH:MM"]

        clock = DateTimeUtils()
        reference = clock.localize(now) if now is not None else clock.now()

        errors = []
        if clock.localize(start) <= reference:
            errors.append("Start date and time must be in the future")
        if end <= start:
            errors.append("End date and time must be after start date and time")
        return errors

    @staticmethod
    def validate_bike_filters(filters: BikeFilters) -> List[str]:
        """Validate price bounds on bike filters."""
        errors = []
        for name in ("min_price", "max_price"):
            value = getattr(filters, name)
            if value is not None and value < 0:
                errors.append(f"{name} must not be negative")
        if (
            filters.min_price is not None
            and filters.max_price is not None
            and filters.min_price > filters.max_price
        ):
            errors.append("min_price must not exceed max_price")
        return errors

    @staticmethod
    def validate_booking_state(state: WizardState, user: Optional[User]) -> List[str]:
        """
        Validate wizard state for submission.

        Args:
            state: Wizard state to validate
            user: Signed-in user, if any

        Returns:
            List of validation error messages
        """
        errors = []
        labels = {
            "selected_bike": "Bike selection is required",
            "start_date": "Start date is required",
            "end_date": "End date is required",
            "selected_partner": "Drop-off partner is required",
        }
        for name in state.missing_booking_fields():
            errors.append(labels[name])
        if user is None:
            errors.append("User information is required")
        return errors
