"""
External API service for handling all rental backend calls.
"""

from typing import Any, Dict, List, Optional
import httpx

from ...core.exceptions import ExternalAPIError, NotFoundError
from ...config import ExternalAPIConfig, get_settings
from ...utils.logging import get_logger

logger = get_logger("cyclelk.external")


def _error_body(response: httpx.Response) -> Optional[Dict[str, Any]]:
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


class ExternalAPIService:
    """Service for handling rental backend API calls."""

    def __init__(self, config: Optional[ExternalAPIConfig] = None, token: Optional[str] = None):
        settings = get_settings()
        self.config = config or ExternalAPIConfig(
            base_url=settings.api_base_url,
            timeout=settings.api_timeout,
            auth_header=settings.api_auth_header,
        )
        self.token = token

    def with_token(self, token: Optional[str]) -> "ExternalAPIService":
        """Return a copy of this service that authenticates as ``token``."""
        return ExternalAPIService(self.config, token)

    async def _make_request(
        self,
        method: str,
        url: str,
        json: Optional[Dict] = None,
        params: Optional[Dict] = None,
        headers: Optional[Dict] = None,
    ) -> Any:
        """Make HTTP request with error handling."""
        request_headers = {**self.config.auth_headers(self.token), **(headers or {})}
        try:
            async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    json=json,
                    params=params,
                    headers=request_headers,
                )
                response.raise_for_status()
                return response.json()
        except httpx.TimeoutException:
            logger.error("%s %s timed out", method, url)
            raise ExternalAPIError("Request timed out")
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            body = _error_body(e.response)
            message = (body or {}).get("message") or f"HTTP error {status_code}"
            logger.warning("%s %s failed: %s %s", method, url, status_code, message)
            if status_code == 404:
                raise NotFoundError(message, status_code, body)
            raise ExternalAPIError(message, status_code, body)
        except httpx.RequestError as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise ExternalAPIError(f"Request failed: {str(e)}")
        except ValueError:
            raise ExternalAPIError(f"Invalid JSON from {url}")

    async def list_bikes(self, params: Dict[str, Any]) -> List[Dict]:
        """List bikes matching catalog query parameters."""
        result = await self._make_request("GET", self.config.bikes_url(), params=params)
        if isinstance(result, dict):
            result = result.get("data", [])
        return result or []

    async def get_bike(self, bike_id: str) -> Dict:
        """Get a single bike by id."""
        return await self._make_request("GET", self.config.bike_url(bike_id))

    async def get_location(self, location_id: str) -> Dict:
        """Get a single location by id."""
        return await self._make_request("GET", self.config.location_url(location_id))

    async def get_partner(self, partner_id: str) -> Dict:
        """Get a single partner by id."""
        return await self._make_request("GET", self.config.partner_url(partner_id))

    async def list_partners_by_location(self, location_id: str) -> List[Dict]:
        """List partners operating at a location."""
        result = await self._make_request(
            "GET", self.config.partners_by_location_url(location_id)
        )
        if isinstance(result, dict):
            result = result.get("data", [])
        return result or []

    async def create_booking(
        self,
        payload: Dict[str, Any],
        extra_headers: Optional[Dict] = None,
    ) -> Dict:
        """Create a booking for the authenticated user."""
        return await self._make_request(
            "POST", self.config.bookings_url(), json=payload, headers=extra_headers
        )

    async def get_current_user(self) -> Dict:
        """Resolve the user behind the current token."""
        return await self._make_request("GET", self.config.current_user_url())
