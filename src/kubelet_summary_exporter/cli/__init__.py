# src/kubelet_summary_exporter/cli/__init__.py
"""
Exporter CLI package.

Exposes the top-level Typer `app` used by the console entrypoint.
"""

from .main import app

__all__ = ["app"]
