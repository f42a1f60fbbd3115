# src/kubelet_summary_exporter/core/config.py

import logging
import os

from dotenv import load_dotenv

from ..utils.duration_utils import parse_duration, parse_listen_address

# Load environment variables from a .env file located in the project root
dotenv_path = os.path.join(os.path.dirname(__file__), "..", "..", "..", ".env")
load_dotenv(dotenv_path=dotenv_path)

DEFAULT_TOKEN_PATH = "/var/run/secrets/kubernetes.io/serviceaccount/token"

_TRUTHY = ("true", "1", "t", "y", "yes")


class Config:
    """
    Handles the exporter's configuration by loading values from environment variables.

    Keyword arguments (the CLI options) take precedence over the environment;
    keys not given are read from the environment or fall back to their default.
    """

    def __init__(self, **overrides):
        self._overrides = overrides

        # --- Prometheus endpoint ---
        self.PROM_LISTEN = self._get("PROM_LISTEN", ":9091")
        self.METRICS_PATH = self._get("METRICS_PATH", "/metrics")

        # --- Kubelet target ---
        self.NODE_HOST = self._get("NODE_HOST", "")
        self.LOOK_UP_HOSTNAME = self._get_bool("LOOK_UP_HOSTNAME", "True")
        self.TIMEOUT = self._get("TIMEOUT", "5s")

        # --- TLS and credentials ---
        self.INSECURE = self._get_bool("INSECURE", "False")
        self.CA_CRT = self._get("CA_CRT", "")
        self.TOKEN = self._get("TOKEN", DEFAULT_TOKEN_PATH)
        # When set, a missing token file at startup is fatal instead of a logged error.
        self.REQUIRE_TOKEN = self._get_bool("REQUIRE_TOKEN", "False")

        # --- Logging variables ---
        self.LOG_LEVEL = self._get("LOG_LEVEL", "INFO")

    def _get(self, key: str, default: str):
        if key in self._overrides:
            return self._overrides[key]
        return os.getenv(key, default)

    def _get_bool(self, key: str, default: str) -> bool:
        if key in self._overrides:
            return bool(self._overrides[key])
        return os.getenv(key, default).lower() in _TRUTHY

    @property
    def timeout_seconds(self) -> float:
        return parse_duration(self.TIMEOUT).total_seconds()

    def validate_instance(self):
        """
        Validates the configuration values.

        Raises:
            ValueError: If a value is missing or malformed.
        """
        if not self.NODE_HOST:
            raise ValueError("NODE_HOST must be set to the node's address or name.")
        if self.timeout_seconds <= 0:
            raise ValueError("TIMEOUT must be a positive duration.")
        parse_listen_address(self.PROM_LISTEN)
        if not self.METRICS_PATH.startswith("/"):
            raise ValueError("METRICS_PATH must start with '/'.")
        if not self.TOKEN:
            raise ValueError("TOKEN must point to a bearer token file.")
        if self.INSECURE:
            logging.getLogger(__name__).warning("INSECURE is set; kubelet certificates will not be verified.")
