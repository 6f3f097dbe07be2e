"""
External API configuration.
"""

from typing import Dict, Optional
from pydantic import BaseModel


class ExternalAPIConfig(BaseModel):
    """Rental backend endpoints used by the booking flow."""

    base_url: str = "http://localhost:50001/api"
    timeout: float = 10.0
    auth_header: str = "x-auth-token"

    def bikes_url(self) -> str:
        return f"{self.base_url}/bikes"

    def bike_url(self, bike_id: str) -> str:
        return f"{self.base_url}/bikes/{bike_id}"

    def location_url(self, location_id: str) -> str:
        return f"{self.base_url}/locations/{location_id}"

    def partner_url(self, partner_id: str) -> str:
        return f"{self.base_url}/partners/{partner_id}"

    def partners_by_location_url(self, location_id: str) -> str:
        return f"{self.base_url}/partners/location/{location_id}"

    def bookings_url(self) -> str:
        return f"{self.base_url}/bookings"

    def current_user_url(self) -> str:
        return f"{self.base_url}/auth/me"

    def auth_headers(self, token: Optional[str]) -> Dict[str, str]:
        """Build the auth header the backend expects, if a token is present."""
        if not token:
            return {}
        return {self.auth_header: token}
