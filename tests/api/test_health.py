"""
Tests for the health check endpoint.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from pharmacy_ledger.main import app
from pharmacy_ledger.models.base import get_db


def test_health_check_returns_200(client):
    response = client.get("/health")
    assert response.status_code == 200


def test_health_check_returns_service_name(client):
    """
    Monitoring parses the service field, so its value is
    part of the response contract.
    """
    response = client.get("/health")
    data = response.json()
    assert data["service"] == "pharmacy-ledger"
    assert data["status"] == "healthy"


def test_health_check_reports_database_status(client):
    response = client.get("/health")
    data = response.json()
    assert data["database"] == "healthy"


def test_unreachable_database_reports_degraded(client):
    """The health check still answers 200 when the database is down."""
    broken = Session(
        bind=create_engine("sqlite:////nonexistent-dir/ledger.db")
    )

    def override_get_db():
        try:
            yield broken
        finally:
            broken.close()

    app.dependency_overrides[get_db] = override_get_db

    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["database"] == "unhealthy"
