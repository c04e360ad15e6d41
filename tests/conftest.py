"""Shared test fixtures for the contact relay test suite.

Provides:
- app: Flask app configured for testing (fixed addresses, no SMTP server)
- client: Flask test client
- outbox: recording mail transport installed as the relay's transport
- valid_payload: a well-formed submission body
"""

import pytest

from contact_relay import create_app
from contact_relay.services.relay_service import ContactRelay, RelaySettings

from tests.fakes import RecordingTransport, run_now


@pytest.fixture(scope="session")
def app():
    """Create the Flask application configured for testing."""
    app = create_app("testing")
    yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def outbox(app):
    """Swap the relay's SMTP transport for a recorder for one test."""
    original = app.extensions["contact_relay"]
    transport = RecordingTransport()
    app.extensions["contact_relay"] = ContactRelay(
        settings=RelaySettings.from_mapping(app.config),
        transport=transport,
        spawn=run_now,
        on_error=transport.report,
    )
    yield transport
    app.extensions["contact_relay"] = original


@pytest.fixture
def valid_payload():
    return {
        "name": "Ana",
        "email": " ana@example.com ",
        "message": "Hi",
    }
