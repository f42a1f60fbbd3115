import ssl

import httpx
import pytest

from kubelet_summary_exporter.core.exceptions import ConfigurationError
from kubelet_summary_exporter.utils.http_client import USER_AGENT, build_ssl_context, get_kubelet_http_client


def test_default_context_verifies_certificates():
    context = build_ssl_context()
    assert context.verify_mode == ssl.CERT_REQUIRED
    assert context.check_hostname is True


def test_insecure_context_skips_verification():
    context = build_ssl_context(insecure=True)
    assert context.verify_mode == ssl.CERT_NONE
    assert context.check_hostname is False


def test_missing_ca_file_is_a_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError, match="Unable to load CA certificates"):
        build_ssl_context(str(tmp_path / "missing-ca.crt"))


def test_ca_file_without_certificates_is_a_configuration_error(tmp_path):
    ca_file = tmp_path / "ca.crt"
    ca_file.write_text("not a certificate\n")
    with pytest.raises(ConfigurationError):
        build_ssl_context(str(ca_file), insecure=True)


async def test_client_timeouts_and_headers():
    async with get_kubelet_http_client(timeout=5.0, verify=build_ssl_context(insecure=True)) as client:
        assert isinstance(client, httpx.AsyncClient)
        assert client.timeout == httpx.Timeout(5.0, connect=2.0)
        assert client.headers["User-Agent"] == USER_AGENT
        assert client.follow_redirects is False


async def test_short_timeout_caps_connect_timeout():
    async with get_kubelet_http_client(timeout=0.5, verify=False) as client:
        assert client.timeout.connect == 0.5
        assert client.timeout.read == 0.5
