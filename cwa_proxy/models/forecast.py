"""Normalized forecast models returned to API callers."""

from dataclasses import dataclass, field
from typing import Any, TypeAlias

# Upstream JSON body; opaque beyond records.datasetDescription and
# records.location[].{locationName, weatherElement}.
RawForecastPayload: TypeAlias = dict[str, Any]


@dataclass(frozen=True)
class ForecastInterval:
    start_time: str
    end_time: str
    weather: str = ""
    rain: str = ""
    min_temp: str = ""
    max_temp: str = ""
    comfort: str = ""
    wind_speed: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "startTime": self.start_time,
            "endTime": self.end_time,
            "weather": self.weather,
            "rain": self.rain,
            "minTemp": self.min_temp,
            "maxTemp": self.max_temp,
            "comfort": self.comfort,
            "windSpeed": self.wind_speed,
        }


@dataclass(frozen=True)
class NormalizedForecast:
    city: str
    update_time: str
    forecasts: list[ForecastInterval] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "city": self.city,
            "updateTime": self.update_time,
            "forecasts": [f.to_dict() for f in self.forecasts],
        }
