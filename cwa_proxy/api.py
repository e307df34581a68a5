"""CWA Weather Forecast API: FastAPI app serving normalized forecasts."""

import logging
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cwa_proxy.config.schema import ProxyConfig
from cwa_proxy.models.errors import ErrorCategory, ForecastProxyError
from cwa_proxy.pipeline.forecast_pipeline import ForecastPipeline

logger = logging.getLogger(__name__)


def create_app(
    config: ProxyConfig, pipeline: ForecastPipeline | None = None
) -> FastAPI:
    """Build the app. Handlers are sync so each request retries on its own worker thread."""
    pipeline = pipeline or ForecastPipeline.from_config(config)

    app = FastAPI(title="CWA Weather Forecast API", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def index():
        return {
            "message": "歡迎使用 CWA 天氣預報 API",
            "endpoints": {
                "weather": "/api/weather/:city",
                "health": "/api/health",
            },
            "availableCities": config.cities,
        }

    @app.get("/api/health")
    def health():
        return {"status": "OK", "timestamp": datetime.now(UTC).isoformat()}

    @app.get("/api/weather")
    def weather_by_query(city: str | None = None):
        """Forecast for ?city=, falling back to the configured default city."""
        return _forecast_envelope(pipeline, city or config.default_city)

    @app.get("/api/weather/{city}")
    def weather(city: str):
        return _forecast_envelope(pipeline, city)

    @app.exception_handler(ForecastProxyError)
    async def forecast_error_handler(request: Request, exc: ForecastProxyError):
        logger.error(
            "%s %s -> %d %s: %s",
            request.method, request.url.path, exc.http_status,
            type(exc).__name__, exc.message,
        )
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            content = {"error": str(ErrorCategory.ROUTE_NOT_FOUND)}
        else:
            content = {"error": str(ErrorCategory.SERVER), "message": str(exc.detail)}
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": str(ErrorCategory.SERVER), "message": str(exc)},
        )

    return app


def _forecast_envelope(pipeline: ForecastPipeline, city: str) -> dict:
    forecast = pipeline.run(city)
    return {"success": True, "data": forecast.to_dict()}
