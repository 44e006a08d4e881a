"""HTTP API layer."""

from k8sdemo.api.app import create_app

__all__ = ["create_app"]
