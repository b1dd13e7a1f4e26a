from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from src.app import logger_instance
from src.market_insight.errors import PrimaryDataError
from src.market_insight.schemas.request import AnalyzeRequest, NewsQuery
from src.market_insight.schemas.response import (
    AnalysisResponse,
    DiagnosticsResponse,
    EarningsResponse,
    NewsResponse,
    QuickAnalysisResponse,
)
from src.market_insight.services.aggregator_service import MarketInsightService


router = APIRouter(prefix="/api")
logger = logger_instance.get_logger(__name__)


def get_market_insight_service(request: Request) -> MarketInsightService:
    """The per-process service created in the application lifespan"""
    return request.app.state.market_insight_service


def _require_symbol(symbol: Optional[str]) -> str:
    if not symbol or not symbol.strip():
        raise HTTPException(status_code=400, detail={"error": "Stock symbol is required"})
    return symbol


def _internal_error(message: str, e: Exception) -> HTTPException:
    logger.error(f"{message}: {e}", exc_info=True)
    return HTTPException(status_code=500, detail={"error": message, "details": str(e)})


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze(
    body: AnalyzeRequest,
    service: MarketInsightService = Depends(get_market_insight_service),
) -> AnalysisResponse:
    """
    Full dashboard analysis for one symbol.

    **Request Example:**
    ```json
    {"symbol": "AAPL"}
    ```

    Returns 400 when the symbol is missing and 502 when the primary quote
    cannot be fetched; every other upstream failure degrades the response
    instead of failing it.
    """
    symbol = _require_symbol(body.symbol)
    try:
        return await service.analyze(symbol)
    except PrimaryDataError as e:
        raise HTTPException(status_code=502, detail={"error": str(e), "details": e.cause})
    except Exception as e:
        raise _internal_error("Internal server error during analysis", e)


@router.post("/analyze/quick", response_model=QuickAnalysisResponse)
async def quick_analyze(
    body: AnalyzeRequest,
    service: MarketInsightService = Depends(get_market_insight_service),
) -> QuickAnalysisResponse:
    """
    Quote-only analysis with a short timeout. Serves a placeholder labelled
    ``mock-fallback`` when the quote provider does not answer.
    """
    symbol = _require_symbol(body.symbol)
    try:
        return await service.quick_analyze(symbol)
    except Exception as e:
        raise _internal_error("Internal server error during quick analysis", e)


@router.get("/news/{symbol}", response_model=NewsResponse)
async def get_news(
    symbol: str,
    limit: int = Query(20, ge=1, le=100),
    sources: str = Query("all", description="'all' or comma separated: newsapi,finnhub,alphavantage,polygon"),
    service: MarketInsightService = Depends(get_market_insight_service),
) -> NewsResponse:
    symbol = _require_symbol(symbol)
    try:
        query = NewsQuery.from_params(limit=limit, sources=sources)
    except ValueError as e:
        raise HTTPException(status_code=400, detail={"error": "Invalid sources", "details": str(e)})

    try:
        return await service.news(symbol, query)
    except Exception as e:
        raise _internal_error("Failed to fetch news", e)


@router.get("/earnings/{symbol}", response_model=EarningsResponse)
async def get_earnings(
    symbol: str,
    service: MarketInsightService = Depends(get_market_insight_service),
) -> EarningsResponse:
    symbol = _require_symbol(symbol)
    try:
        return await service.earnings(symbol)
    except Exception as e:
        raise _internal_error("Failed to fetch earnings data", e)


@router.get("/test/{symbol}", response_model=DiagnosticsResponse)
async def provider_diagnostics(
    symbol: str,
    service: MarketInsightService = Depends(get_market_insight_service),
) -> DiagnosticsResponse:
    """Probe each provider for the symbol and report which ones answered"""
    symbol = _require_symbol(symbol)
    try:
        return await service.diagnostics(symbol)
    except Exception as e:
        raise _internal_error("Provider diagnostics failed", e)
