# tests/api/conftest.py
"""
Shared fixtures for API tests.
Uses FastAPI's TestClient around a collector backed by a stub fetcher.
"""

import pytest
from fastapi.testclient import TestClient

from kubelet_summary_exporter.api.app import create_app
from kubelet_summary_exporter.collectors.ephemeral_storage_collector import EphemeralStorageCollector

SUMMARY_BODY = (
    b'{"node":{"nodeName":"ip-1"},"pods":[{"podRef":{"name":"p1","namespace":"ns1"},'
    b'"ephemeral-storage":{"usedBytes":36864,"availableBytes":92321636352}}]}'
)


@pytest.fixture
def fetcher(stub_fetcher):
    return stub_fetcher(body=SUMMARY_BODY)


@pytest.fixture
def collector(fetcher):
    return EphemeralStorageCollector(fetcher)


@pytest.fixture
def client(collector):
    """Creates a TestClient serving the collector on the default path."""
    app = create_app(collector)
    with TestClient(app) as c:
        yield c
