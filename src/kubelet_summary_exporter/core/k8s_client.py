import logging
import threading
import typing

from kubernetes import client, config
from kubernetes.client.rest import ApiException

from .exceptions import HostnameLookupError

logger = logging.getLogger(__name__)

# Global lock to prevent race conditions during config loading
_CONFIG_LOCK = threading.Lock()
_CONFIG_LOADED = False

NODE_HOSTNAME_ADDRESS_TYPE = "Hostname"


def ensure_k8s_config() -> bool:
    """
    Ensures that the Kubernetes configuration is loaded exactly once.

    Returns:
        bool: True if config was loaded successfully (or was already loaded), False otherwise.
    """
    global _CONFIG_LOADED

    if _CONFIG_LOADED:
        return True

    with _CONFIG_LOCK:
        # Double-check locking pattern
        if _CONFIG_LOADED:
            return True

        # Try in-cluster config first
        try:
            logger.debug("Attempting to load in-cluster Kubernetes config...")
            config.load_incluster_config()
            logger.info("Loaded in-cluster Kubernetes configuration.")
            _CONFIG_LOADED = True
            return True
        except config.ConfigException:
            logger.debug("In-cluster config not found.")

        # Try local kubeconfig
        try:
            logger.debug("Attempting to load local kubeconfig...")
            config.load_kube_config()
            logger.info("Loaded Kubernetes configuration from kubeconfig file.")
            _CONFIG_LOADED = True
            return True
        except (config.ConfigException, FileNotFoundError):
            logger.warning("Could not find kubeconfig file.")

    logger.warning("Failed to load any Kubernetes configuration.")
    return False


def get_core_v1_api() -> typing.Optional[client.CoreV1Api]:
    """
    Returns a configured CoreV1Api instance, or None without a configuration.
    """
    if ensure_k8s_config():
        return client.CoreV1Api()
    return None


def resolve_node_hostname(node_name: str) -> str:
    """
    Looks up the node through the API server and returns its ``Hostname`` address.

    The downward API hands the sidecar the node name, which is not always the
    name the kubelet certificate was issued for.

    Raises:
        HostnameLookupError: If the API is unreachable, the node does not exist
            or it reports no Hostname address.
    """
    api = get_core_v1_api()
    if not api:
        raise HostnameLookupError("Kubernetes client not configured; cannot look up node hostname.")

    try:
        node = api.read_node(name=node_name)
    except ApiException as e:
        raise HostnameLookupError(f"Kubernetes API error while reading node '{node_name}': {e.reason}") from e
    finally:
        api.api_client.close()

    addresses = (node.status.addresses if node.status else None) or []
    for address in addresses:
        if address.type == NODE_HOSTNAME_ADDRESS_TYPE:
            logger.debug("Node '%s' has hostname '%s'.", node_name, address.address)
            return address.address

    raise HostnameLookupError(f"no node matching '{node_name}' found")
