# src/kubelet_summary_exporter/cli/serve.py
"""
Serve command for the exporter CLI.

Wires the configuration, TLS context, optional hostname lookup and collector
together and runs the HTTP endpoint until SIGINT/SIGTERM.
"""

import logging
import os
import traceback
from typing import Optional

import typer
import uvicorn
from typing_extensions import Annotated

from ..api.app import create_app
from ..collectors.ephemeral_storage_collector import EphemeralStorageCollector
from ..collectors.summary_fetcher import SummaryFetcher
from ..core.config import DEFAULT_TOKEN_PATH, Config
from ..core.exceptions import ConfigurationError, HostnameLookupError
from ..core.k8s_client import resolve_node_hostname
from ..utils.duration_utils import parse_listen_address
from ..utils.http_client import build_ssl_context

logger = logging.getLogger(__name__)

app = typer.Typer(name="serve", help="Serve kubelet ephemeral storage metrics for Prometheus.")

# Grace period for in-flight scrapes once a shutdown signal arrives.
SHUTDOWN_GRACE_SECONDS = 5


def resolve_server_host(cfg: Config) -> str:
    """
    Returns the host the kubelet certificate is validated against: the node's
    Hostname from the API server when lookup is enabled, NODE_HOST otherwise.
    """
    if not cfg.LOOK_UP_HOSTNAME:
        return cfg.NODE_HOST

    hostname = resolve_node_hostname(cfg.NODE_HOST)
    logger.info(
        "Using hostname '%s' for certificate validation (original: '%s').",
        hostname,
        cfg.NODE_HOST,
    )
    return hostname


def check_token_file(cfg: Config) -> None:
    """
    Reports a missing token file at startup. Fatal only when REQUIRE_TOKEN is set;
    otherwise every scrape reports a token-read-error until the file appears.
    """
    if os.path.isfile(cfg.TOKEN):
        return
    if cfg.REQUIRE_TOKEN:
        raise ConfigurationError(f"Token file '{cfg.TOKEN}' not found and REQUIRE_TOKEN is set.")
    logger.error("Token not found at '%s'; scrapes will fail until it exists.", cfg.TOKEN)


def build_collector(cfg: Config) -> EphemeralStorageCollector:
    """Builds the collector from a validated configuration; the CA bundle is read here, once."""
    ssl_context = build_ssl_context(cfg.CA_CRT, insecure=cfg.INSECURE)
    check_token_file(cfg)
    server_host = resolve_server_host(cfg)

    fetcher = SummaryFetcher(
        verify=ssl_context,
        host=server_host,
        dial_host=cfg.NODE_HOST,
        token_path=cfg.TOKEN,
        timeout=cfg.timeout_seconds,
    )
    return EphemeralStorageCollector(fetcher)


def run_server(application, listen: str, log_level: str) -> None:
    """Runs uvicorn; it handles SIGINT/SIGTERM and drains in-flight scrapes."""
    host, port = parse_listen_address(listen)
    server = uvicorn.Server(
        uvicorn.Config(
            application,
            host=host,
            port=port,
            log_config=None,
            log_level=log_level.lower(),
            timeout_graceful_shutdown=SHUTDOWN_GRACE_SECONDS,
        )
    )
    server.run()


@app.callback(invoke_without_command=True)
def serve(
    ctx: typer.Context,
    prom_listen: Annotated[
        str, typer.Option("--prom-listen", envvar="PROM_LISTEN", help="Address to listen on for Prometheus metrics.")
    ] = ":9091",
    metrics_path: Annotated[
        str, typer.Option("--metrics-path", envvar="METRICS_PATH", help="Path of the metrics endpoint.")
    ] = "/metrics",
    node_host: Annotated[
        Optional[str],
        typer.Option("--node-host", envvar="NODE_HOST", help="Address to request kubelet's stats/summary from."),
    ] = None,
    insecure: Annotated[
        bool, typer.Option("--insecure", envvar="INSECURE", help="Don't validate kubelet certificates.")
    ] = False,
    ca: Annotated[str, typer.Option("--ca", envvar="CA_CRT", help="CA certificate bundle location.")] = "",
    token_path: Annotated[
        str, typer.Option("--token-path", envvar="TOKEN", help="Bearer token location.")
    ] = DEFAULT_TOKEN_PATH,
    timeout: Annotated[
        str, typer.Option("--timeout", envvar="TIMEOUT", help="Timeout for kubelet requests (e.g. '5s', '500ms').")
    ] = "5s",
    look_up_hostname: Annotated[
        bool,
        typer.Option(
            "--look-up-hostname/--no-look-up-hostname",
            envvar="LOOK_UP_HOSTNAME",
            help="Use the API server to determine the node hostname (assumes in-cluster config).",
        ),
    ] = True,
    require_token: Annotated[
        bool,
        typer.Option("--require-token", envvar="REQUIRE_TOKEN", help="Refuse to start when the token file is missing."),
    ] = False,
) -> None:
    """
    Start the exporter and serve metrics until interrupted.
    """
    if ctx.invoked_subcommand is not None:
        return

    cfg = Config(
        PROM_LISTEN=prom_listen,
        METRICS_PATH=metrics_path,
        NODE_HOST=node_host or "",
        INSECURE=insecure,
        CA_CRT=ca,
        TOKEN=token_path,
        TIMEOUT=timeout,
        LOOK_UP_HOSTNAME=look_up_hostname,
        REQUIRE_TOKEN=require_token,
    )

    logging.basicConfig(
        level=cfg.LOG_LEVEL.upper(),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        cfg.validate_instance()
        collector = build_collector(cfg)
    except (ValueError, ConfigurationError, HostnameLookupError) as e:
        logger.error("Unable to start exporter: %s", e)
        raise typer.Exit(code=1)
    except Exception as e:
        logger.error("An unexpected error occurred during startup: %s", e)
        logger.error("Startup failed: %s", traceback.format_exc())
        raise typer.Exit(code=1)

    application = create_app(collector, metrics_path=cfg.METRICS_PATH, use_lifespan=True)
    logger.info("Starting kubelet summary exporter on %s", cfg.PROM_LISTEN)
    run_server(application, cfg.PROM_LISTEN, cfg.LOG_LEVEL)
    logger.info("Kubelet summary exporter stopped.")
