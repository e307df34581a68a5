"""Forecast pipeline: fetch the raw dataset, then normalize it."""

import logging
import time

from cwa_proxy.config.schema import ProxyConfig
from cwa_proxy.ingest.cwa_client import CwaClient
from cwa_proxy.models.forecast import NormalizedForecast
from cwa_proxy.transform.normalizer import normalize

logger = logging.getLogger(__name__)


class ForecastPipeline:
    def __init__(self, client: CwaClient):
        self.client = client

    @classmethod
    def from_config(cls, config: ProxyConfig) -> "ForecastPipeline":
        return cls(CwaClient(config.api_key, config.upstream))

    def run(self, location_name: str) -> NormalizedForecast:
        """Fetch and normalize the forecast for one location.

        ForecastProxyError subclasses from either stage propagate unchanged.
        """
        start_time = time.monotonic()
        payload = self.client.fetch(location_name)
        forecast = normalize(payload)
        logger.info(
            "Forecast ready for %s: %d intervals in %.2fs",
            forecast.city, len(forecast.forecasts), time.monotonic() - start_time,
        )
        return forecast
