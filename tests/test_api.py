"""
HTTP wiring tests for routes that need no database.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from eduhub.core.database import get_db
from eduhub.main import app
from eduhub.modules.auth.service import AccountNotVerifiedError


@pytest.fixture
def client(mock_db):
    app.dependency_overrides[get_db] = lambda: mock_db
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestPublicRoutes:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_institution_search(self, client):
        response = client.get("/api/v1/institutions", params={"q": "cape town"})

        assert response.status_code == 200
        assert [i["id"] for i in response.json()["items"]] == ["uct"]

    def test_evaluate_prerequisites(self, client):
        response = client.post(
            "/api/v1/eligibility/evaluate",
            json={
                "prerequisites": ["Mathematics > 70%", "Physical Sciences > 60%"],
                "marks": [{"name": "Mathematics", "percentage": 75}],
            },
        )

        body = response.json()
        assert body["qualified"] is True
        assert [r["status"] for r in body["rules"]] == ["met", "unknown"]

    def test_nsfas_estimate(self, client):
        response = client.post(
            "/api/v1/eligibility/nsfas",
            json={"nsfas_required": True, "sassa_beneficiary": False, "household_income": 120000},
        )
        assert response.json() == {"estimate": "likely_eligible", "label": "Likely Eligible"}

    def test_wizard_requires_login(self, client):
        assert client.get("/api/v1/applications/wizard").status_code in (401, 403)


class TestAuthErrors:
    def test_unverified_login_tells_client_to_verify(self, client):
        with patch(
            "eduhub.modules.auth.router.service.login",
            new=AsyncMock(side_effect=AccountNotVerifiedError("thabo@test.com")),
        ):
            response = client.post(
                "/api/v1/auth/login", json={"email": "thabo@test.com", "password": "secret123"}
            )

        assert response.status_code == 403
        detail = response.json()["detail"]
        assert detail["error"] == "ACCOUNT_NOT_VERIFIED"
        assert detail["needs_verification"] is True
        assert detail["email"] == "thabo@test.com"
