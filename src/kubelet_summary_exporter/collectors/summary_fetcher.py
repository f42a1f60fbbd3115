# src/kubelet_summary_exporter/collectors/summary_fetcher.py
"""
Fetches the raw ``/stats/summary`` document from the local kubelet.
"""

import asyncio
import logging
import ssl
from pathlib import Path
from typing import Optional, Union

import httpx

from ..core.exceptions import ScrapeError, ScrapeErrorType
from ..utils.http_client import get_kubelet_http_client

logger = logging.getLogger(__name__)

KUBELET_PORT = 10250
SUMMARY_PATH = "/stats/summary"


def read_bearer_token(token_path: str) -> str:
    """
    Reads the service account token. Called before every request so a
    rotated token is picked up without a restart.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is empty.
    """
    token = Path(token_path).read_text().strip()
    if not token:
        raise ValueError(f"Token file '{token_path}' is empty")
    return token


class SummaryFetcher:
    """
    Performs a single authenticated GET against the kubelet summary endpoint.

    ``host`` is the name the kubelet certificate is validated against and is
    used in the URL and the Host header. When ``dial_host`` differs (e.g. the
    node IP handed down by the downward API), the connection is made to
    ``dial_host`` while TLS still presents ``host`` as server name.

    ``timeout`` bounds the whole exchange: waiting for the response headers
    and reading the body share one deadline.
    """

    def __init__(
        self,
        host: str,
        token_path: str,
        timeout: float,
        verify: Union[ssl.SSLContext, bool] = True,
        dial_host: Optional[str] = None,
        port: int = KUBELET_PORT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.host = host
        self.dial_host = dial_host or host
        self.port = port
        self.token_path = token_path
        self.timeout = timeout
        self._verify = verify
        self._transport = transport

    @property
    def url(self) -> str:
        return f"https://{self.host}:{self.port}{SUMMARY_PATH}"

    def fetch(self) -> bytes:
        """
        Returns the raw response body of ``/stats/summary``.

        Runs the request on its own event loop, so it must be called from a
        thread without a running loop (scrapes run in the server's threadpool).

        Raises:
            ScrapeError: Classified by the stage that failed; no retries are made.
        """
        try:
            token = read_bearer_token(self.token_path)
        except (OSError, ValueError) as e:
            raise ScrapeError(ScrapeErrorType.TOKEN_READ, f"unable to load token from {self.token_path}: {e}") from e

        return asyncio.run(self._fetch(token))

    async def _fetch(self, token: str) -> bytes:
        async with get_kubelet_http_client(self.timeout, verify=self._verify, transport=self._transport) as client:
            try:
                request = self._build_request(client, token)
            except (httpx.InvalidURL, ValueError) as e:
                raise ScrapeError(ScrapeErrorType.REQUEST_CONSTRUCTION, f"failed to create request: {e}") from e

            loop = asyncio.get_running_loop()
            deadline = loop.time() + self.timeout

            try:
                response = await asyncio.wait_for(client.send(request, stream=True), self.timeout)
            except asyncio.TimeoutError as e:
                raise ScrapeError(
                    ScrapeErrorType.TRANSPORT, f"no response from {self.url} within {self.timeout}s"
                ) from e
            except httpx.TransportError as e:
                raise ScrapeError(
                    ScrapeErrorType.TRANSPORT, f"failed to make request to {self.url}: {type(e).__name__}: {e}"
                ) from e

            try:
                if response.status_code != httpx.codes.OK:
                    raise ScrapeError(
                        ScrapeErrorType.STATUS,
                        f"got unexpected status {response.status_code} {response.reason_phrase} for {self.url}",
                    )
                return await asyncio.wait_for(self._read_body(response), max(deadline - loop.time(), 0))
            except asyncio.TimeoutError as e:
                raise ScrapeError(
                    ScrapeErrorType.BODY_READ, f"timed out after {self.timeout}s reading body from {self.url}"
                ) from e
            finally:
                await response.aclose()

    def _build_request(self, client: httpx.AsyncClient, token: str) -> httpx.Request:
        url = httpx.URL(self.url)
        headers = {"Authorization": f"Bearer {token}"}
        extensions = {}
        if self.dial_host != self.host:
            url = url.copy_with(host=self.dial_host)
            headers["Host"] = f"{self.host}:{self.port}"
            extensions["sni_hostname"] = self.host
        return client.build_request("GET", url, headers=headers, extensions=extensions)

    @staticmethod
    async def _read_body(response: httpx.Response) -> bytes:
        try:
            return await response.aread()
        except httpx.HTTPError as e:
            raise ScrapeError(ScrapeErrorType.BODY_READ, f"failed to read body: {type(e).__name__}: {e}") from e
