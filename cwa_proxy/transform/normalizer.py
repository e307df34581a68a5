"""Reshape raw CWA weather elements into per-interval forecast records."""

import logging

from cwa_proxy.models.errors import InconsistentPayload, MalformedPayload
from cwa_proxy.models.forecast import (
    ForecastInterval,
    NormalizedForecast,
    RawForecastPayload,
)

logger = logging.getLogger(__name__)

# Element tag -> (ForecastInterval field, unit suffix). Tags not listed here
# are ignored so new upstream elements never break normalization.
ELEMENT_FIELDS: dict[str, tuple[str, str]] = {
    "Wx": ("weather", ""),
    "PoP": ("rain", "%"),
    "MinT": ("min_temp", "°C"),
    "MaxT": ("max_temp", "°C"),
    "CI": ("comfort", ""),
    "WS": ("wind_speed", ""),
}


def normalize(payload: RawForecastPayload) -> NormalizedForecast:
    """Build a NormalizedForecast from a payload the client already validated.

    Uses the first records.location entry. Every weather element must carry
    the same number of time entries as the first one; interval boundaries
    come from the first element.
    """
    records = payload["records"]
    location = records["location"][0]
    elements = location.get("weatherElement") or []
    city = location.get("locationName", "")

    if not elements:
        raise InconsistentPayload(f"{city} 的預報資料缺少天氣因子")
    interval_count = len(elements[0].get("time") or [])
    _check_aligned(city, elements, interval_count)

    forecasts = []
    for i in range(interval_count):
        try:
            forecasts.append(_build_interval(elements, i))
        except (KeyError, TypeError, AttributeError) as e:
            logger.error(
                "Malformed time entry %d for %s: %s %s", i, city, type(e).__name__, e
            )
            raise MalformedPayload() from e

    logger.debug("Normalized %d intervals for %s", len(forecasts), city)
    return NormalizedForecast(
        city=city,
        update_time=records.get("datasetDescription", ""),
        forecasts=forecasts,
    )


def _check_aligned(city: str, elements: list[dict], interval_count: int) -> None:
    for element in elements:
        count = len(element.get("time") or [])
        if count != interval_count:
            raise InconsistentPayload(
                f"{city} 的天氣因子 {element.get('elementName')} 有 {count} 個時段，"
                f"預期 {interval_count} 個"
            )


def _build_interval(elements: list[dict], i: int) -> ForecastInterval:
    window = elements[0]["time"][i]
    values: dict[str, str] = {}
    for element in elements:
        mapped = ELEMENT_FIELDS.get(element.get("elementName"))
        if mapped is None:
            continue
        field_name, suffix = mapped
        value = element["time"][i]["parameter"]["parameterName"]
        values[field_name] = f"{value}{suffix}"
    return ForecastInterval(
        start_time=window["startTime"],
        end_time=window["endTime"],
        **values,
    )
