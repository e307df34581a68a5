"""Pydantic v2 configuration schema with strict validation."""

from pydantic import BaseModel, Field

CWA_API_BASE_URL = "https://opendata.cwa.gov.tw/api"
FORECAST_DATASET_ID = "F-C0032-001"  # 一般天氣預報-今明 36 小時天氣預報
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
)


class UpstreamConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = CWA_API_BASE_URL
    dataset_id: str = FORECAST_DATASET_ID
    timeout_seconds: float = Field(default=10.0, gt=0.0)
    max_attempts: int = Field(default=4, ge=1)
    initial_delay_ms: int = Field(default=100, ge=0)
    retry_delay_ms: int = Field(default=500, ge=0)
    user_agent: str = BROWSER_USER_AGENT
    accept_language: str = "zh-TW,zh;q=0.9"
    referer: str = "https://opendata.cwa.gov.tw/"


class ServerConfig(BaseModel):
    model_config = {"extra": "forbid"}

    host: str = "0.0.0.0"
    port: int = Field(default=2000, ge=1, le=65535)
    cors_origins: list[str] = ["*"]


class ProxyConfig(BaseModel):
    model_config = {"extra": "forbid"}

    api_key: str = ""
    default_city: str = "臺北市"
    cities: list[str] = []
    upstream: UpstreamConfig = UpstreamConfig()
    server: ServerConfig = ServerConfig()
