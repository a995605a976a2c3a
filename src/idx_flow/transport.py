# transport.py
# Transport collaborator. The engine calls `request()` and never touches
# httpx directly, so tests swap the whole transport for a MagicMock.

import logging
from typing import Any

import httpx

from idx_flow.errors import AuthApiError, TransportError

logger = logging.getLogger(__name__)


def _parse_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


class HttpTransport:
    """JSON-over-HTTP transport backed by a long-lived httpx.Client."""

    def __init__(self, timeout: float = 10.0, client: httpx.Client | None = None) -> None:
        self._timeout = timeout
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        args: dict | None = None,
        with_credentials: bool | None = None,
    ) -> Any:
        """
        Send one request and return the decoded JSON body.

        Non-2xx answers raise AuthApiError carrying the decoded body so callers
        can recognise exchange documents returned with an error status.
        Network failures raise TransportError chained to the httpx exception.
        """
        logger.debug("%s %s", method, url)
        try:
            if with_credentials is False:
                # No cookie jar: a throwaway client never sees session cookies.
                with httpx.Client(timeout=self._timeout) as anonymous:
                    response = anonymous.request(method, url, headers=headers, json=args)
            else:
                response = self._client.request(method, url, headers=headers, json=args)
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        body = _parse_body(response)
        if response.is_error:
            logger.info("%s %s -> %s", method, url, response.status_code)
            raise AuthApiError(
                f"{method} {url} returned {response.status_code}",
                status_code=response.status_code,
                response_body=body,
                headers=dict(response.headers),
            )
        return body
