"""Error taxonomy for the forecast proxy.

Every failure that leaves the fetch/normalize core is a ForecastProxyError
carrying the caller-facing category string and HTTP status, so the API layer
can render the `{error, message}` envelope without inspecting the cause.
"""

from enum import StrEnum


class ErrorCategory(StrEnum):
    CONFIGURATION = "伺服器設定錯誤"
    RESPONSE_FORMAT = "API 回應格式錯誤"
    NOT_FOUND = "查無資料"
    UPSTREAM = "CWA API 錯誤"
    SERVER = "伺服器錯誤"
    ROUTE_NOT_FOUND = "找不到此路徑"


class ForecastProxyError(Exception):
    category: ErrorCategory = ErrorCategory.SERVER
    http_status: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"error": str(self.category), "message": self.message}


class ConfigurationError(ForecastProxyError):
    category = ErrorCategory.CONFIGURATION


class MissingCredential(ConfigurationError):
    def __init__(self, message: str = "請在 .env 檔案中設定 CWA_API_KEY"):
        super().__init__(message)


class PermanentUpstreamFailure(ForecastProxyError):
    category = ErrorCategory.RESPONSE_FORMAT


class UpstreamSoftBlock(PermanentUpstreamFailure):
    """Upstream kept answering with a markup page instead of JSON."""

    def __init__(self, message: str = "CWA API 回應的資料格式不符合預期"):
        super().__init__(message)


class MalformedPayload(PermanentUpstreamFailure):
    """Upstream JSON lacked the records.location structure."""

    def __init__(self, message: str = "CWA API 回應的資料格式不符合預期"):
        super().__init__(message)


class InconsistentPayload(PermanentUpstreamFailure):
    """Weather elements disagree on the number of forecast intervals."""


class UpstreamError(PermanentUpstreamFailure):
    """Network or HTTP failure that survived every retry.

    status_code is None when no response was received (timeout, refused
    connection); the caller then answers 500.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def category(self) -> ErrorCategory:  # type: ignore[override]
        if self.status_code is None:
            return ErrorCategory.SERVER
        return ErrorCategory.UPSTREAM

    @property
    def http_status(self) -> int:  # type: ignore[override]
        return self.status_code or 500


class NotFound(ForecastProxyError):
    category = ErrorCategory.NOT_FOUND
    http_status = 404


class LocationNotFound(NotFound):
    def __init__(self, location_name: str):
        super().__init__(f"無法取得{location_name}天氣資料")
        self.location_name = location_name


class TransientUpstreamFailure(Exception):
    """A single failed attempt; retried while the attempt budget lasts.

    `terminal` is the error raised to the caller if this turns out to be the
    last attempt.
    """

    def __init__(self, terminal: ForecastProxyError):
        super().__init__(terminal.message)
        self.terminal = terminal
