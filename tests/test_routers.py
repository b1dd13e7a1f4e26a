"""HTTP surface tests: status codes and error body shapes"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from src.main import get_application
from src.market_insight.errors import PrimaryDataError
from src.market_insight.schemas.quote import AssetType
from src.market_insight.schemas.response import MOCK_FALLBACK_SOURCE, QuickAnalysisResponse
from src.routers.market_insight import get_market_insight_service
from src.utils.config import get_settings


@pytest.fixture
def service():
    return AsyncMock()


@pytest.fixture
def client(settings, service):
    app = get_application(lifespan=None, settings=settings)
    app.dependency_overrides[get_market_insight_service] = lambda: service
    app.dependency_overrides[get_settings] = lambda: settings
    return TestClient(app)


# ============================================================================
# ANALYZE
# ============================================================================

class TestAnalyzeEndpoint:

    @pytest.mark.parametrize("body", [{}, {"symbol": ""}, {"symbol": "   "}])
    def test_missing_symbol_is_400(self, client, service, body):
        response = client.post("/api/analyze", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Stock symbol is required"}
        service.analyze.assert_not_called()

    def test_primary_data_failure_is_502(self, client, service):
        service.analyze.side_effect = PrimaryDataError("NOPE", "HTTP 404")

        response = client.post("/api/analyze", json={"symbol": "NOPE"})

        assert response.status_code == 502
        body = response.json()
        assert body["error"].startswith("Unable to fetch real market data for NOPE")
        assert body["details"] == "HTTP 404"

    def test_unexpected_error_is_500(self, client, service):
        service.analyze.side_effect = RuntimeError("bug")

        response = client.post("/api/analyze", json={"symbol": "AAPL"})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error during analysis", "details": "bug"}

    def test_quick_analyze_placeholder(self, client, service):
        service.quick_analyze.return_value = QuickAnalysisResponse(
            symbol="AAPL", company="Apple Inc", asset_type=AssetType.STOCK,
            source=MOCK_FALLBACK_SOURCE, is_estimated=True, error="timed out after 6.0s",
        )

        response = client.post("/api/analyze/quick", json={"symbol": "AAPL"})

        assert response.status_code == 200
        body = response.json()
        assert body["source"] == "mock-fallback"
        assert body["current_price"] is None
        assert body["is_estimated"] is True


# ============================================================================
# NEWS / EARNINGS
# ============================================================================

class TestNewsEndpoint:

    def test_unknown_source_is_400(self, client, service):
        response = client.get("/api/news/AAPL", params={"sources": "newsapi,bogus"})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid sources"
        service.news.assert_not_called()

    @pytest.mark.parametrize("limit", [0, 101])
    def test_limit_out_of_range_is_422(self, client, limit):
        response = client.get("/api/news/AAPL", params={"limit": limit})

        assert response.status_code == 422

    def test_earnings_failure_is_500(self, client, service):
        service.earnings.side_effect = RuntimeError("boom")

        response = client.get("/api/earnings/AAPL")

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to fetch earnings data"

    @pytest.mark.parametrize("path,method", [
        ("/api/news/%20", "news"),
        ("/api/earnings/%20", "earnings"),
        ("/api/test/%20%20", "diagnostics"),
    ])
    def test_blank_path_symbol_is_400(self, client, service, path, method):
        response = client.get(path)

        assert response.status_code == 400
        assert response.json() == {"error": "Stock symbol is required"}
        getattr(service, method).assert_not_called()


# ============================================================================
# HEALTH
# ============================================================================

class TestHealthEndpoints:

    def test_service_status(self, client, settings):
        response = client.get("/")

        assert response.status_code == 200
        body = response.json()
        assert body["version"] == settings.API_VERSION
        assert body["api_status"]["fmp"] is True
        assert body["api_status"]["iex"] is False
        assert "Yahoo Finance" in body["data_sources"]

    def test_ping(self, client, settings):
        response = client.get("/ping")

        assert response.json() == {"REVISION": settings.API_VERSION}
