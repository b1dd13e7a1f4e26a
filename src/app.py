class LoggerInstance(object):
    def __new__(cls):
        from src.utils.logger.custom_logging import LogHandler
        return LogHandler()

class IncludeAPIRouter(object):
    def __new__(cls):
        from fastapi.routing import APIRouter

        # =============================================================================
        # IMPORT ALL ROUTERS
        # =============================================================================

        # Core system routers
        from src.routers.health_check import router as router_health_check

        # Market insight routers
        from src.routers.market_insight import router as router_market_insight

        # =============================================================================
        # CONFIGURE MAIN ROUTER AND INCLUDE ALL SUB-ROUTERS
        # =============================================================================

        # The dashboard calls these paths without a version prefix
        router = APIRouter()

        router.include_router(router_health_check, tags=['Health Check'])
        router.include_router(router_market_insight, tags=['Market Insight'])

        return router


# Instance creation
logger_instance = LoggerInstance()
