"""
Catalog service: locations and bikes bookable at a pickup location.
"""

from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ...core.exceptions import ExternalAPIError
from ...core.models.catalog import Bike, BikeFilters, Location
from ..external import ExternalAPIService

M = TypeVar("M", bound=BaseModel)


def parse_record(model: Type[M], data: Any) -> M:
    """Validate one backend document; malformed ones raise ExternalAPIError."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ExternalAPIError(f"Unexpected {model.__name__.lower()} data from server") from e


class CatalogService:
    """Lists bikes available for booking."""

    def __init__(self, external_api: ExternalAPIService):
        self.external_api = external_api

    async def list_available(
        self,
        location_id: str,
        filters: Optional[BikeFilters] = None,
    ) -> List[Bike]:
        """Get bikes bookable at ``location_id``, narrowed by ``filters``."""
        params = {"location": location_id, "available": "true"}
        if filters is not None:
            params.update(filters.to_query_params())

        items = await self.external_api.list_bikes(params)
        return [parse_record(Bike, item) for item in items]

    async def get_location(self, location_id: str) -> Location:
        """Resolve a location by id."""
        data = await self.external_api.get_location(location_id)
        return parse_record(Location, data)

    async def get_bike(self, bike_id: str) -> Bike:
        """Resolve a single bike by id."""
        data = await self.external_api.get_bike(bike_id)
        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            data = data["data"]
        return parse_record(Bike, data)
