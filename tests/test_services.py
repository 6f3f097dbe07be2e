"""
Tests for catalog, partner and booking gateway services.
"""

import pytest
from unittest.mock import AsyncMock

from cyclelk_booking.core.exceptions import BookingGatewayError, BookingValidationError, ExternalAPIError
from cyclelk_booking.core.models import BikeFilters, Location, MapLocation, Partner, WizardState
from cyclelk_booking.core.enums import BikeSort, WizardStep
from cyclelk_booking.services.booking import BookingGateway
from cyclelk_booking.services.catalog import CatalogService
from cyclelk_booking.services.partners import ADDRESS_NOT_AVAILABLE, PartnerDirectory


class TestCatalogService:
    """Test bike availability lookups."""

    @pytest.mark.asyncio
    async def test_list_available_builds_query(self, mock_external_api):
        mock_external_api.list_bikes = AsyncMock(
            return_value=[{"_id": "b1", "name": "Trek", "type": "hybrid", "pricing": {"perDay": 1000}}]
        )
        catalog = CatalogService(mock_external_api)

        bikes = await catalog.list_available(
            "loc-colombo", BikeFilters(type="hybrid", max_price=1500, sort=BikeSort.RATING)
        )

        assert [b.id for b in bikes] == ["b1"]
        mock_external_api.list_bikes.assert_awaited_once_with(
            {"location": "loc-colombo", "available": "true", "type": "hybrid", "maxPrice": 1500.0, "sort": "rating"}
        )

    @pytest.mark.asyncio
    async def test_empty_catalog(self, mock_external_api):
        mock_external_api.list_bikes = AsyncMock(return_value=[])
        assert await CatalogService(mock_external_api).list_available("loc-jaffna") == []


class TestPartnerDirectory:
    """Test partner lookups and the drop-off description."""

    @pytest.mark.asyncio
    async def test_get_by_id(self, mock_external_api):
        mock_external_api.get_partner = AsyncMock(return_value={"_id": "p1", "companyName": "Kandy Cycles"})
        partner = await PartnerDirectory(mock_external_api).get_by_id("p1")
        assert partner.company_name == "Kandy Cycles"
        mock_external_api.get_partner.assert_awaited_once_with("p1")

    def test_describe_dropoff_prefers_partner_address(self, dropoff_partner, kandy):
        assert PartnerDirectory.describe_dropoff(dropoff_partner, kandy) == "Kandy Cycles - 12 Temple Rd"

    def test_describe_dropoff_falls_back_to_map_location(self, kandy):
        partner = Partner(id="p2", company_name="Lake Bikes", map_location=MapLocation(address="5 Lake Dr"))
        assert PartnerDirectory.describe_dropoff(partner, kandy) == "Lake Bikes - 5 Lake Dr"

    def test_describe_dropoff_falls_back_to_location_name(self, kandy):
        partner = Partner(id="p3", company_name="Hill Rides")
        assert PartnerDirectory.describe_dropoff(partner, kandy) == "Hill Rides - Kandy"

    def test_describe_dropoff_without_any_address(self):
        partner = Partner(id="p4", company_name="Nowhere Bikes")
        assert PartnerDirectory.describe_dropoff(partner, None) == f"Nowhere Bikes - {ADDRESS_NOT_AVAILABLE}"


def confirm_state(bike, partner, pickup, dropoff):
    return WizardState(
        current_step=WizardStep.CONFIRM,
        pickup_location=pickup,
        dropoff_location=dropoff,
        selected_bike=bike,
        start_date="2030-03-01",
        start_time=None,
        end_date="2030-03-02",
        end_time=None,
        selected_partner=partner,
    )


class TestBookingGateway:
    """Test booking submission."""

    def test_build_request_defaults_times(
        self, gateway, sample_bike, dropoff_partner, colombo, kandy, sample_user
    ):
        state = confirm_state(sample_bike, dropoff_partner, colombo, kandy)
        request = gateway.build_request(state, sample_user)
        assert request.start_time == "2030-03-01T00:00:00+05:30"
        assert request.end_time == "2030-03-02T23:59:00+05:30"
        assert request.delivery_address is None
        assert request.dropoff_location == "Kandy Cycles - 12 Temple Rd"

    def test_build_request_requires_user(self, gateway, sample_bike, dropoff_partner, colombo, kandy):
        state = confirm_state(sample_bike, dropoff_partner, colombo, kandy)
        with pytest.raises(BookingValidationError, match="User information is required"):
            gateway.build_request(state, None)

    def test_idempotency_key_is_stable(
        self, gateway, sample_bike, dropoff_partner, colombo, kandy, sample_user
    ):
        state = confirm_state(sample_bike, dropoff_partner, colombo, kandy)
        first = BookingGateway.build_idempotency_key(gateway.build_request(state, sample_user), sample_user)
        second = BookingGateway.build_idempotency_key(gateway.build_request(state, sample_user), sample_user)
        assert first == second
        assert len(first) == 64

    @pytest.mark.asyncio
    async def test_create_unwraps_data(self, mock_external_api, gateway, sample_bike, dropoff_partner, colombo, kandy, sample_user):
        mock_external_api.create_booking = AsyncMock(return_value={"data": {"_id": "bk9", "status": "requested"}})
        request = gateway.build_request(confirm_state(sample_bike, dropoff_partner, colombo, kandy), sample_user)
        booking = await gateway.create(request, idempotency_key="abc")
        assert booking.id == "bk9"
        mock_external_api.create_booking.assert_awaited_once_with(
            request.to_payload(), extra_headers={"Idempotency-Key": "abc"}
        )

    @pytest.mark.asyncio
    async def test_create_failure_carries_backend_message(
        self, mock_external_api, gateway, sample_bike, dropoff_partner, colombo, kandy, sample_user
    ):
        mock_external_api.create_booking = AsyncMock(
            side_effect=ExternalAPIError("HTTP error 400", 400, {"message": "Dates overlap an existing booking"})
        )
        request = gateway.build_request(confirm_state(sample_bike, dropoff_partner, colombo, kandy), sample_user)
        with pytest.raises(BookingGatewayError) as exc:
            await gateway.create(request)
        assert str(exc.value) == "Dates overlap an existing booking"
        assert exc.value.status_code == 400

    @pytest.mark.asyncio
    async def test_create_without_booking_id_is_a_gateway_error(
        self, mock_external_api, gateway, sample_bike, dropoff_partner, colombo, kandy, sample_user
    ):
        mock_external_api.create_booking = AsyncMock(return_value={"message": "Booking created"})
        request = gateway.build_request(confirm_state(sample_bike, dropoff_partner, colombo, kandy), sample_user)
        with pytest.raises(BookingGatewayError) as exc:
            await gateway.create(request)
        assert str(exc.value) == "Booking was not confirmed by the server. Please try again."
        assert exc.value.response_data is None

    def test_build_request_rejects_malformed_time(
        self, gateway, sample_bike, dropoff_partner, colombo, kandy, sample_user
    ):
        state = confirm_state(sample_bike, dropoff_partner, colombo, kandy)
        state.start_time = "9am"
        with pytest.raises(BookingValidationError, match="Dates must be YYYY-MM-DD and times HH:MM"):
            gateway.build_request(state, sample_user)


class TestMalformedBackendData:
    """Documents that fail model validation surface as ExternalAPIError."""

    @pytest.mark.asyncio
    async def test_bike_without_type(self, mock_external_api):
        mock_external_api.list_bikes = AsyncMock(return_value=[{"_id": "b1", "name": "Trek"}])
        with pytest.raises(ExternalAPIError, match="Unexpected bike data from server"):
            await CatalogService(mock_external_api).list_available("loc-colombo")

    @pytest.mark.asyncio
    async def test_location_without_name(self, mock_external_api):
        mock_external_api.get_location = AsyncMock(return_value={"_id": "loc-x"})
        with pytest.raises(ExternalAPIError, match="Unexpected location data from server"):
            await CatalogService(mock_external_api).get_location("loc-x")

    @pytest.mark.asyncio
    async def test_partner_without_company_name(self, mock_external_api):
        mock_external_api.get_partner = AsyncMock(return_value={"_id": "p1"})
        with pytest.raises(ExternalAPIError, match="Unexpected partner data from server"):
            await PartnerDirectory(mock_external_api).get_by_id("p1")

    @pytest.mark.asyncio
    async def test_partner_list_with_bad_entry(self, mock_external_api):
        mock_external_api.list_partners_by_location = AsyncMock(return_value=["not-a-partner"])
        with pytest.raises(ExternalAPIError):
            await PartnerDirectory(mock_external_api).list_by_location("loc-kandy")
