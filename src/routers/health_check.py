from fastapi import Depends, status
from fastapi.routing import APIRouter
from fastapi.responses import JSONResponse

from src.app import logger_instance
from src.market_insight.schemas.response import ServiceStatusResponse
from src.utils.config import Settings, get_settings


router = APIRouter()
logger = logger_instance.get_logger(__name__)

DATA_SOURCES = ['Yahoo Finance', 'CoinGecko', 'FMP', 'NewsAPI', 'Finnhub', 'Alpha Vantage', 'Polygon']
FEATURES = [
    'Asset-Specific Fundamentals',
    'Comprehensive News',
    'Quarterly Earnings',
    'Multiple News Sources',
]


@router.get('/', response_model=ServiceStatusResponse)
async def service_status(settings: Settings = Depends(get_settings)) -> ServiceStatusResponse:
    return ServiceStatusResponse(
        message=settings.API_NAME,
        version=settings.API_VERSION,
        data_sources=DATA_SOURCES,
        features=FEATURES,
        api_status=settings.provider_status(),
    )


@router.get('/ping', responses={200: {
            'description': 'Healthcheck Service',
            'content': {
                'application/json': {
                    'example': {'REVISION': '1.0.0'}
                }
            }
        }})
async def health_check(settings: Settings = Depends(get_settings)) -> JSONResponse:
    logger.info('event=health-check-success message="Successful health check. "')
    content = {'REVISION': settings.API_VERSION}
    return JSONResponse(content=content, status_code=status.HTTP_200_OK)
