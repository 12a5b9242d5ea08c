"""
Location: python/turnkey_sdk/transport.py

Summary:
    HTTP transport for the signer service. Sends a stamped JSON body with a
    single attempt and classifies failures into NetworkError and HttpError.

Usage:
    Used by poller.py and client.py. Retry decisions belong to the caller:
    submissions are never retried, polls may be.

Example:
    from turnkey_sdk.transport import TurnkeyTransport, SUBMIT_SIGN_RAW_PAYLOAD

    transport = TurnkeyTransport("https://api.turnkey.com")
    data = await transport.send(SUBMIT_SIGN_RAW_PAYLOAD, body, stamp)
    await transport.close()
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from .errors import HttpError, MalformedResponseError, NetworkError
from .stamper import STAMP_HEADER, encode_stamp
from .types import ApiStamp, TurnkeyErrorResponse


logger = logging.getLogger(__name__)

# Service endpoints (versioned contract owned by the service)
SUBMIT_SIGN_RAW_PAYLOAD = "/public/v1/submit/sign_raw_payload"
QUERY_GET_ACTIVITY = "/public/v1/query/get_activity"
QUERY_WHOAMI = "/public/v1/query/whoami"


class TurnkeyTransport:
    """
    Single-attempt HTTP transport over httpx.AsyncClient.

    Attributes:
        base_url: Service base URL without trailing slash
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        http: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the transport.

        Args:
            base_url: Service base URL (trailing slash removed)
            timeout: Request timeout in seconds (default 30)
            http: Optional pre-configured AsyncClient. A client passed in
                is not closed by close().
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        """Close the underlying HTTP client if this transport created it."""
        if self._owns_http:
            await self._http.aclose()

    async def send(self, path: str, body: bytes, stamp: ApiStamp) -> dict[str, Any]:
        """
        POST a stamped body and return the parsed JSON object.

        Args:
            path: Endpoint path appended to base_url
            body: Exact bytes that were stamped
            stamp: Stamp computed over body

        Returns:
            Parsed JSON response object

        Raises:
            NetworkError: On connection failures and timeouts
            HttpError: On non-2xx responses
            MalformedResponseError: If a 2xx body is not a JSON object
        """
        url = f"{self.base_url}{path}"
        headers = {
            "Content-Type": "application/json",
            STAMP_HEADER: encode_stamp(stamp),
        }

        logger.debug("POST %s", path)
        try:
            response = await self._http.post(url, content=body, headers=headers)
        except httpx.TransportError as exc:
            raise NetworkError(f"Request to {path} failed: {exc!r}") from exc

        if not response.is_success:
            raise _http_error(response)

        try:
            data = response.json()
        except ValueError as exc:
            raise MalformedResponseError(f"{path} returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise MalformedResponseError(f"{path} returned {type(data).__name__}, expected object")
        return data


def _http_error(response: httpx.Response) -> HttpError:
    """
    Build an HttpError from a rejected response.

    The service error payload is attached when the body parses as one.

    Args:
        response: The non-2xx response

    Returns:
        HttpError carrying status, body text and parsed error
    """
    body = response.text
    error = None
    try:
        error = TurnkeyErrorResponse.model_validate_json(body)
    except ValidationError:
        pass
    return HttpError(response.status_code, body, error)
