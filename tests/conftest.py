"""
Pytest configuration and fixtures.
"""

import pytest
from unittest.mock import Mock, AsyncMock

from cyclelk_booking.config import get_settings
from cyclelk_booking.core.models import Bike, Location, Partner, User
from cyclelk_booking.services.booking import BookingGateway, BookingWizard
from cyclelk_booking.services.catalog import CatalogService
from cyclelk_booking.services.external import ExternalAPIService
from cyclelk_booking.services.partners import PartnerDirectory
from cyclelk_booking.utils.event_log import set_log_path, set_session_id


class FakeAuth:
    """AuthPort double that counts login redirects."""

    def __init__(self, user=None):
        self._user = user
        self.login_redirects = 0

    @property
    def is_authenticated(self):
        return self._user is not None

    @property
    def user(self):
        return self._user

    def redirect_to_login(self):
        self.login_redirects += 1


class FakeNavigator:
    def __init__(self):
        self.paths = []

    def navigate_to(self, path):
        self.paths.append(path)


class FakeNotifier:
    def __init__(self):
        self.messages = []

    def notify(self, message, level="info"):
        self.messages.append((level, message))


@pytest.fixture(autouse=True)
def event_log_file(tmp_path):
    """Send wizard events to a per-test JSONL file."""
    get_settings.cache_clear()
    log_file = tmp_path / "events.jsonl"
    set_log_path(log_file)
    set_session_id(None)
    yield log_file
    set_log_path(None)
    get_settings.cache_clear()


@pytest.fixture
def colombo():
    return Location.model_validate({"_id": "loc-colombo", "name": "Colombo", "region": "Western"})


@pytest.fixture
def kandy():
    return Location.model_validate({"_id": "loc-kandy", "name": "Kandy", "region": "Central"})


@pytest.fixture
def sample_bike():
    """A bike as returned by the rental backend."""
    return Bike.model_validate(
        {
            "_id": "bike1",
            "name": "Trek FX 3",
            "type": "hybrid",
            "location": "loc-colombo",
            "rating": 4.5,
            "pricing": {"perHour": 150, "perDay": 1000, "perWeek": 5500, "deliveryFee": 200},
            "currentPartnerId": {"_id": "partner-pickup", "companyName": "Colombo Cycles"},
        }
    )


@pytest.fixture
def pickup_partner():
    return Partner.model_validate(
        {"_id": "partner-pickup", "companyName": "Colombo Cycles", "address": "45 Galle Rd"}
    )


@pytest.fixture
def dropoff_partner():
    return Partner.model_validate(
        {
            "_id": "p1",
            "companyName": "Kandy Cycles",
            "address": "12 Temple Rd",
            "location": {"_id": "loc-kandy", "name": "Kandy"},
        }
    )


@pytest.fixture
def sample_user():
    return User.model_validate(
        {"_id": "u1", "firstName": "Nimal", "lastName": "Perera", "email": "nimal@example.com"}
    )


@pytest.fixture
def mock_external_api():
    """Mock external API service."""
    api = Mock(spec=ExternalAPIService)
    api.create_booking = AsyncMock(
        return_value={"_id": "bk1", "bookingNumber": "CL-0001", "status": "requested"}
    )
    return api


@pytest.fixture
def mock_catalog(sample_bike, colombo, kandy):
    """Mock catalog service."""
    catalog = Mock(spec=CatalogService)
    catalog.list_available = AsyncMock(return_value=[sample_bike])
    catalog.get_location = AsyncMock(
        side_effect=lambda location_id: {"loc-colombo": colombo, "loc-kandy": kandy}[location_id]
    )
    return catalog


@pytest.fixture
def mock_partners(pickup_partner, dropoff_partner):
    """Mock partner directory."""
    partners = Mock(spec=PartnerDirectory)
    by_id = {"partner-pickup": pickup_partner, "p1": dropoff_partner}
    partners.get_by_id = AsyncMock(side_effect=lambda partner_id: by_id[partner_id])
    partners.list_by_location = AsyncMock(return_value=[dropoff_partner])
    return partners


@pytest.fixture
def gateway(mock_external_api):
    return BookingGateway(mock_external_api)


@pytest.fixture
def auth(sample_user):
    return FakeAuth(sample_user)


@pytest.fixture
def navigator():
    return FakeNavigator()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def sleeps():
    """Seconds passed to the wizard's injected sleep."""
    return []


@pytest.fixture
def wizard(mock_catalog, mock_partners, gateway, auth, navigator, notifier, sleeps):
    """Create a booking wizard with mocked collaborators and instant sleep."""

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    return BookingWizard(
        catalog=mock_catalog,
        partners=mock_partners,
        gateway=gateway,
        auth=auth,
        navigator=navigator,
        notifier=notifier,
        sleep=fake_sleep,
    )
