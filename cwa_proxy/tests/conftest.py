"""Shared test fixtures."""

import json
from pathlib import Path

import pytest
import yaml

from cwa_proxy.config.defaults import DEFAULT_CITIES
from cwa_proxy.config.schema import ProxyConfig, UpstreamConfig

FIXTURE_DIR = Path(__file__).parent / "fixtures"

TEST_BASE_URL = "https://test-cwa.example.com/api"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep the developer's shell environment out of config loading."""
    monkeypatch.delenv("CWA_API_KEY", raising=False)
    monkeypatch.delenv("PORT", raising=False)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return FIXTURE_DIR


@pytest.fixture
def taipei_payload() -> dict:
    """Three-interval 臺北市 payload with Wx, PoP, MinT, CI, MaxT (no WS)."""
    with open(FIXTURE_DIR / "cwa_forecast_taipei.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def empty_payload() -> dict:
    with open(FIXTURE_DIR / "cwa_forecast_empty.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def upstream() -> UpstreamConfig:
    return UpstreamConfig(base_url=TEST_BASE_URL)


@pytest.fixture
def proxy_config(upstream: UpstreamConfig) -> ProxyConfig:
    return ProxyConfig(
        api_key="CWA-TEST-KEY",
        cities=list(DEFAULT_CITIES),
        upstream=upstream,
    )


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "api_key": "CWA-FROM-YAML",
        "upstream": {"timeout_seconds": 5.0, "max_attempts": 2},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, allow_unicode=True)
    return path


def _build_payload(location_name: str, elements: dict[str, list[str]]) -> dict:
    weather_elements = []
    for name, values in elements.items():
        weather_elements.append({
            "elementName": name,
            "time": [
                {
                    "startTime": f"2026-10-18T{i:02d}:00:00+08:00",
                    "endTime": f"2026-10-18T{i + 1:02d}:00:00+08:00",
                    "parameter": {"parameterName": value},
                }
                for i, value in enumerate(values)
            ],
        })
    return {
        "success": "true",
        "records": {
            "datasetDescription": "三十六小時天氣預報",
            "location": [
                {"locationName": location_name, "weatherElement": weather_elements}
            ],
        },
    }


@pytest.fixture
def make_payload():
    """Factory: build a one-location payload from {elementName: [parameterName, ...]}.

    Interval i spans hour i to hour i + 1 for every element.
    """
    return _build_payload
