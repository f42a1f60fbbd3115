# tests/core/test_k8s_client.py

from unittest.mock import MagicMock, patch

import pytest
from kubernetes import client
from kubernetes.client.rest import ApiException

from kubelet_summary_exporter.core import k8s_client
from kubelet_summary_exporter.core.exceptions import HostnameLookupError


def create_mock_node(addresses):
    """Helper function to create a V1Node with the given (type, address) pairs."""
    return client.V1Node(
        metadata=client.V1ObjectMeta(name="node-1"),
        status=client.V1NodeStatus(
            addresses=[client.V1NodeAddress(type=t, address=a) for t, a in addresses],
        ),
    )


@pytest.fixture
def mock_api():
    api = MagicMock(spec=client.CoreV1Api)
    api.api_client = MagicMock()
    with patch.object(k8s_client, "get_core_v1_api", return_value=api):
        yield api


def test_resolve_returns_hostname_address(mock_api):
    mock_api.read_node.return_value = create_mock_node(
        [("InternalIP", "10.0.0.5"), ("Hostname", "ip-10-0-0-5.ec2.internal")]
    )

    assert k8s_client.resolve_node_hostname("node-1") == "ip-10-0-0-5.ec2.internal"
    mock_api.read_node.assert_called_once_with(name="node-1")
    mock_api.api_client.close.assert_called_once()


def test_resolve_without_hostname_address_fails(mock_api):
    mock_api.read_node.return_value = create_mock_node([("InternalIP", "10.0.0.5")])

    with pytest.raises(HostnameLookupError, match="no node matching 'node-1' found"):
        k8s_client.resolve_node_hostname("node-1")


def test_resolve_api_error_fails(mock_api):
    mock_api.read_node.side_effect = ApiException(status=404, reason="Not Found")

    with pytest.raises(HostnameLookupError, match="Not Found"):
        k8s_client.resolve_node_hostname("node-1")
    mock_api.api_client.close.assert_called_once()


def test_resolve_without_kubernetes_config_fails():
    with patch.object(k8s_client, "get_core_v1_api", return_value=None):
        with pytest.raises(HostnameLookupError, match="not configured"):
            k8s_client.resolve_node_hostname("node-1")


@patch("kubelet_summary_exporter.core.k8s_client.config.load_kube_config")
@patch("kubelet_summary_exporter.core.k8s_client.config.load_incluster_config")
def test_ensure_config_falls_back_to_kubeconfig(mock_load_incluster, mock_load_kube, monkeypatch):
    monkeypatch.setattr(k8s_client, "_CONFIG_LOADED", False)
    mock_load_incluster.side_effect = k8s_client.config.ConfigException("not in cluster")

    assert k8s_client.ensure_k8s_config() is True
    assert k8s_client.ensure_k8s_config() is True

    mock_load_incluster.assert_called_once()
    mock_load_kube.assert_called_once()


@patch("kubelet_summary_exporter.core.k8s_client.config.load_kube_config")
@patch("kubelet_summary_exporter.core.k8s_client.config.load_incluster_config")
def test_ensure_config_reports_missing_configuration(mock_load_incluster, mock_load_kube, monkeypatch):
    monkeypatch.setattr(k8s_client, "_CONFIG_LOADED", False)
    mock_load_incluster.side_effect = k8s_client.config.ConfigException("not in cluster")
    mock_load_kube.side_effect = k8s_client.config.ConfigException("no kubeconfig")

    assert k8s_client.ensure_k8s_config() is False
