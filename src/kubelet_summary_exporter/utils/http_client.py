import logging
import ssl
from typing import Optional, Union

import httpx

from .. import __version__
from ..core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

USER_AGENT = f"kubelet-summary-exporter/{__version__}"

# Upper bound for establishing a connection to the kubelet.
DEFAULT_TIMEOUT_CONNECT = 2.0


def build_ssl_context(ca_file: Optional[str] = None, insecure: bool = False) -> ssl.SSLContext:
    """
    Builds the TLS context used to talk to the kubelet.

    The CA bundle is read once here. With ``insecure`` the bundle is still loaded
    (so a broken path is reported at startup) but certificates are not verified.

    Raises:
        ConfigurationError: If the CA bundle cannot be read or holds no certificate.
    """
    try:
        context = ssl.create_default_context(cafile=ca_file or None)
    except (OSError, ssl.SSLError) as e:
        raise ConfigurationError(f"Unable to load CA certificates from '{ca_file}': {e}") from e

    if insecure:
        logger.warning("Using insecure TLS; kubelet certificates will not be verified.")
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def get_kubelet_http_client(
    timeout: float,
    verify: Union[ssl.SSLContext, bool] = True,
    connect_timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Returns a configured httpx.AsyncClient for kubelet requests with:
    - The given timeout applied to every phase (connect capped at 2 seconds).
    - TLS verification through ``verify``, normally the context from build_ssl_context.
    - Standard User-Agent header.

    Each fetch opens its own client; only the TLS context is shared.
    """
    c_timeout = connect_timeout if connect_timeout is not None else min(DEFAULT_TIMEOUT_CONNECT, timeout)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout, connect=c_timeout),
        headers={"User-Agent": USER_AGENT},
        verify=verify,
        follow_redirects=False,
        transport=transport,
    )
