"""Catly HTTP API package."""

from catly.api.main import create_serve_app, create_upload_app

__all__ = ["create_serve_app", "create_upload_app"]
