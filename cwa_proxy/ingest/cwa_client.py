"""CWA open-data API client with bounded retry and response classification."""

import logging
import time

import httpx

from cwa_proxy.config.schema import UpstreamConfig
from cwa_proxy.models.errors import (
    LocationNotFound,
    MalformedPayload,
    MissingCredential,
    TransientUpstreamFailure,
    UpstreamError,
    UpstreamSoftBlock,
)
from cwa_proxy.models.forecast import RawForecastPayload

logger = logging.getLogger(__name__)

MARKUP_CONTENT_TYPES = ("text/html", "application/xhtml+xml")
DEFAULT_UPSTREAM_MESSAGE = "無法取得天氣資料"
NETWORK_FAILURE_MESSAGE = "無法取得天氣資料，請稍後再試"


class CwaClient:
    """Fetches the 36-hour forecast dataset for one location per call.

    Holds configuration only; nothing is shared between fetches.
    """

    def __init__(self, api_key: str, upstream: UpstreamConfig | None = None):
        self.api_key = api_key
        self.upstream = upstream or UpstreamConfig()

    @property
    def url(self) -> str:
        base = self.upstream.base_url.rstrip("/")
        return f"{base}/v1/rest/datastore/{self.upstream.dataset_id}"

    def _headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.upstream.user_agent,
            "Accept": "application/json",
            "Accept-Language": self.upstream.accept_language,
            "Referer": self.upstream.referer,
        }

    def fetch(self, location_name: str) -> RawForecastPayload:
        """Fetch the raw forecast payload for a location.

        Soft-blocks, malformed bodies, network errors and non-2xx responses
        are retried until max_attempts is spent. The first attempt waits
        initial_delay_ms and every later one retry_delay_ms so rapid-fire
        requests do not trip the upstream WAF.

        Raises:
            MissingCredential: no API key; raised before any request.
            UpstreamSoftBlock: the last attempt returned an HTML page.
            MalformedPayload: the last attempt lacked records.location.
            UpstreamError: the last attempt failed at the network/HTTP level.
            LocationNotFound: valid payload with no location entries.
        """
        if not self.api_key:
            raise MissingCredential()

        max_attempts = self.upstream.max_attempts
        last_failure: TransientUpstreamFailure | None = None
        for attempt in range(max_attempts):
            if attempt == 0:
                delay_ms = self.upstream.initial_delay_ms
            else:
                delay_ms = self.upstream.retry_delay_ms
                logger.warning(
                    "Retrying CWA request for %s in %dms (retry %d/%d)",
                    location_name, delay_ms, attempt, max_attempts - 1,
                )
            time.sleep(delay_ms / 1000)

            try:
                payload = self._attempt(location_name, attempt + 1)
            except TransientUpstreamFailure as e:
                logger.warning(
                    "CWA attempt %d/%d for %s failed: %s",
                    attempt + 1, max_attempts, location_name, e,
                )
                last_failure = e
                continue

            if not payload["records"]["location"]:
                raise LocationNotFound(location_name)
            logger.info(
                "Fetched CWA forecast for %s on attempt %d", location_name, attempt + 1
            )
            return payload

        assert last_failure is not None
        logger.error(
            "CWA request for %s exhausted %d attempts: %s",
            location_name, max_attempts, last_failure,
        )
        raise last_failure.terminal

    def _attempt(self, location_name: str, attempt: int) -> RawForecastPayload:
        """Issue one request; raise TransientUpstreamFailure on any bad outcome."""
        params = {"Authorization": self.api_key, "locationName": location_name}
        logger.debug("CWA attempt %d: GET %s locationName=%s", attempt, self.url, location_name)
        try:
            resp = httpx.get(
                self.url,
                params=params,
                headers=self._headers(),
                timeout=self.upstream.timeout_seconds,
                follow_redirects=True,
            )
        except httpx.RequestError as e:
            logger.warning(
                "CWA attempt %d request error: %s: %s", attempt, type(e).__name__, e
            )
            raise TransientUpstreamFailure(UpstreamError(NETWORK_FAILURE_MESSAGE)) from e

        logger.debug(
            "CWA status=%d content-type=%s",
            resp.status_code, resp.headers.get("content-type", ""),
        )
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransientUpstreamFailure(_status_error(resp)) from e

        return classify_response(resp)


def classify_response(resp: httpx.Response) -> RawForecastPayload:
    """Return the payload of a 2xx response or raise a transient failure.

    An HTML body means the upstream WAF intercepted the request (soft-block);
    JSON without records.location is malformed.
    """
    content_type = resp.headers.get("content-type", "").lower()
    if any(t in content_type for t in MARKUP_CONTENT_TYPES):
        raise TransientUpstreamFailure(UpstreamSoftBlock())

    try:
        payload = resp.json()
    except ValueError as e:
        raise TransientUpstreamFailure(MalformedPayload()) from e

    if not has_location_records(payload):
        raise TransientUpstreamFailure(MalformedPayload())
    return payload


def has_location_records(payload: object) -> bool:
    if not isinstance(payload, dict):
        return False
    records = payload.get("records")
    if not isinstance(records, dict):
        return False
    return isinstance(records.get("location"), list)


def _status_error(resp: httpx.Response) -> UpstreamError:
    """Build an UpstreamError preserving the upstream status and message."""
    message = DEFAULT_UPSTREAM_MESSAGE
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        message = str(body["message"])
    return UpstreamError(message, status_code=resp.status_code)
