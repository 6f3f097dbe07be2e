"""
Partner directory: rental shops used for pickup and drop-off.
"""

from typing import List, Optional

from ...core.models.catalog import Location, Partner
from ..catalog.service import parse_record
from ..external import ExternalAPIService

ADDRESS_NOT_AVAILABLE = "Address not available"


class PartnerDirectory:
    """Resolves partner records."""

    def __init__(self, external_api: ExternalAPIService):
        self.external_api = external_api

    async def get_by_id(self, partner_id: str) -> Partner:
        """Get a partner by id; raises NotFoundError for unknown ids."""
        data = await self.external_api.get_partner(partner_id)
        return parse_record(Partner, data)

    async def list_by_location(self, location_id: str) -> List[Partner]:
        """Get the partners operating at a location."""
        items = await self.external_api.list_partners_by_location(location_id)
        return [parse_record(Partner, item) for item in items]

    @staticmethod
    def describe_dropoff(partner: Partner, dropoff_location: Optional[Location]) -> str:
        """Human-readable drop-off string sent with a booking."""
        address = (
            partner.address
            or (partner.map_location.address if partner.map_location else None)
            or (dropoff_location.name if dropoff_location else None)
            or ADDRESS_NOT_AVAILABLE
        )
        return f"{partner.company_name} - {address}"
