"""
AB FIRST - Service Transport
============================
Bearer-authenticated JSON requests to the A/B test service.

Requests never raise for HTTP or parse failures; they return a tagged
result instead:

    result = await http.get(url)
    match result:
        case Ok(data):
            ...
        case Err(error):
            logger.error(f"{error.url} failed with status {error.status}")
"""

import json
import time
from dataclasses import dataclass, asdict
from typing import Any, Callable, Dict, Optional, Union

import httpx

from abfirst.core.exceptions import FetchException
from abfirst.core.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass(frozen=True)
class FetchError:
    """A failed request: non-2xx status, unparsable body, or no response."""
    url: str
    status: Optional[int]
    body: str
    error_message: str = ""
    type: str = "fetch-error"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Ok:
    data: Any

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> Any:
        return self.data

    def map(self, func: Callable[[Any], Any]) -> "Ok":
        return Ok(func(self.data))


@dataclass(frozen=True)
class Err:
    error: FetchError

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise FetchException(self.error)

    def map(self, func: Callable[[Any], Any]) -> "Err":
        return self


Result = Union[Ok, Err]


# =============================================================================
# HTTP CLIENT
# =============================================================================

class AbTestsHttpClient:
    """
    JSON transport for the A/B test service.

    Every request carries ``Authorization: Bearer <token>`` and a JSON
    content type; caller-supplied headers are merged over those.
    """

    def __init__(
        self,
        api_token: str,
        timeout: Optional[float] = 30.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.api_token = api_token
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    # =========================================================================
    # HTTP CLIENT MANAGEMENT
    # =========================================================================

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def close(self):
        """Close the HTTP client if it was created here."""
        if self._client and self._owns_client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    def _get_headers(self, extra_headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
        }
        if extra_headers:
            headers.update(extra_headers)
        return headers

    # =========================================================================
    # REQUESTS
    # =========================================================================

    async def get(self, url: str, extra_headers: Optional[Dict[str, str]] = None) -> Result:
        return await self._request("GET", url, None, extra_headers)

    async def post(
        self,
        url: str,
        data: Any = None,
        extra_headers: Optional[Dict[str, str]] = None
    ) -> Result:
        # Anything that is not already a string is sent as JSON
        if not isinstance(data, str):
            data = json.dumps(data if data is not None else {})
        return await self._request("POST", url, data, extra_headers)

    async def _request(
        self,
        method: str,
        url: str,
        content: Optional[str],
        extra_headers: Optional[Dict[str, str]]
    ) -> Result:
        client = await self._get_client()
        start = time.time()

        try:
            response = await client.request(
                method,
                url,
                content=content,
                headers=self._get_headers(extra_headers)
            )
        except (httpx.HTTPError, UnicodeEncodeError) as e:
            # Includes non-ASCII header values from the caller
            logger.error(
                f"Request to {url} with {method} failed: {type(e).__name__}: {e}",
                url=url,
                status=None
            )
            return Err(FetchError(url=url, status=None, body="", error_message=str(e) or type(e).__name__))

        duration_ms = int((time.time() - start) * 1000)
        logger.api_call("abtests", method, duration_ms, response.status_code, url=url)

        return self._handle_response(method, url, response)

    def _handle_response(self, method: str, url: str, response: httpx.Response) -> Result:
        body = response.text

        try:
            parsed = {} if body == "" else json.loads(body)
        except ValueError:
            logger.error(
                f"Got an error when parsing the JSON response from the request to {url} "
                f"with {method}. The status code was {response.status_code} and the result was: {body[:500]}",
                url=url,
                status=response.status_code
            )
            return Err(FetchError(
                url=url,
                status=response.status_code,
                body=body,
                error_message="Error parsing json response"
            ))

        if response.is_success:
            return Ok(parsed)

        logger.error(
            f"Error fetching data from {url}: {response.status_code} {body[:500]}",
            url=url,
            status=response.status_code
        )
        return Err(FetchError(
            url=url,
            status=response.status_code,
            body=body,
            error_message=f"HTTP {response.status_code}"
        ))
