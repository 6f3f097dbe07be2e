"""
Catalog data models: locations, bikes and rental partners.

The rental backend speaks camelCase JSON and identifies documents with
``_id``; these models accept either spelling and ignore keys they do not
use so that the wizard only depends on what it actually renders.
"""

from typing import Any, List, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..enums import BikeSort


class CatalogModel(BaseModel):
    """Base model for backend documents."""

    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Coordinates(CatalogModel):
    latitude: float
    longitude: float


class Location(CatalogModel):
    """A city or area where bikes can be picked up and dropped off."""

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    name: str
    description: Optional[str] = None
    region: Optional[str] = None
    coordinates: Optional[Coordinates] = None


class BikePricing(CatalogModel):
    """Rates configured by the partner for a bike."""

    per_hour: Optional[float] = None
    per_day: float
    per_week: Optional[float] = None
    per_month: Optional[float] = None
    delivery_fee: Optional[float] = None


class Bike(CatalogModel):
    """A bike listed in the catalog."""

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    name: str
    type: str
    brand: Optional[str] = None
    model: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    rating: Optional[float] = None
    pricing: BikePricing
    current_partner_id: Optional[str] = None
    images: List[Any] = Field(default_factory=list)

    @field_validator("current_partner_id", mode="before")
    @classmethod
    def _partner_ref(cls, value: Any) -> Optional[str]:
        # The backend sometimes populates the reference into a document.
        if isinstance(value, dict):
            return value.get("_id") or value.get("id")
        return value


class MapLocation(CatalogModel):
    name: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class Partner(CatalogModel):
    """A rental shop that can hand out or take back bikes."""

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    company_name: str
    address: Optional[str] = None
    map_location: Optional[MapLocation] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    location: Optional[str] = None
    rating: Optional[float] = None

    @field_validator("location", mode="before")
    @classmethod
    def _location_ref(cls, value: Any) -> Optional[str]:
        if isinstance(value, dict):
            return value.get("_id") or value.get("id") or value.get("name")
        return value


class BikeFilters(CatalogModel):
    """Optional narrowing of the bikes offered at a pickup location."""

    type: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    sort: Optional[BikeSort] = None

    def to_query_params(self) -> dict:
        """Return the non-empty filters as backend query parameters."""
        params = self.model_dump(by_alias=True, exclude_none=True, mode="json")
        return params
