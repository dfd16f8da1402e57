"""
Integration tests for /property.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient


@pytest.mark.integration
def test_property_returns_display_data(client: TestClient, property_id: str) -> None:
    response = client.get("/property")

    assert response.status_code == 200
    assert response.json() == {
        "id": property_id,
        "name": "Ocean View Villa",
        "description": "Test villa",
        "location": "Malibu, California",
        "amenities": ["WiFi", "Pool"],
        "images": ["https://example.com/villa.jpg"],
        "base_price": 100.0,
    }


@pytest.mark.integration
def test_property_not_seeded(client: TestClient) -> None:
    response = client.get("/property")

    assert response.status_code == 404


@pytest.mark.integration
@patch("villa_booking.routes.property.config.PROPERTY_ID", None)
def test_property_not_configured(client: TestClient, property_id: str) -> None:
    response = client.get("/property")

    assert response.status_code == 404
    assert response.json() == {"error": "Property not found"}
