"""Catly CLI.

Usage:
    catly serve [--storage-path PATH] [--domain URL] [--host HOST]
                [--http-port PORT] [--upload-port PORT]
                [--max-request-size BYTES] [--log-level LEVEL]
    catly upload PATH [--server URL]

Flags given to `serve` override the CATLY_* environment variables.

Exit codes:
    0: Success
    1: Upload failed / invalid configuration / storage unavailable
"""

from __future__ import annotations

import argparse
import base64
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Any

import httpx

from catly.config import ConfigError, Settings
from catly.storage.errors import StorageDirectoryError

logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "http://127.0.0.1:8000"
UPLOAD_TIMEOUT_SECONDS = 30.0
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# serve flag -> Settings field
_SERVE_OVERRIDES = (
    "storage_path",
    "domain",
    "host",
    "http_port",
    "upload_port",
    "max_request_size",
    "log_level",
)


class UploadFailedError(Exception):
    """Raised when an upload does not produce an object URL."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


def _failure_reason(response: httpx.Response) -> str:
    """Extract a human-readable reason from an error response."""
    try:
        body: Any = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("error", "message"):
            if body.get(key):
                return str(body[key])
    return f"HTTP {response.status_code}"


def upload_file(path: str | Path, server: str, client: httpx.Client | None = None) -> str:
    """Upload a local file under its base name.

    Args:
        path: File to upload.
        server: Base URL of the upload API.
        client: HTTP client to use. A short-lived client is created if None.

    Returns:
        The public URL of the stored object.

    Raises:
        UploadFailedError: If the file cannot be read, the server cannot be
            reached, or the server refuses the upload.
    """
    file_path = Path(path)
    try:
        data = file_path.read_bytes()
    except OSError as e:
        raise UploadFailedError(f"cannot read {file_path}: {e.strerror or e}") from e

    body = {"name": file_path.name, "data": base64.b64encode(data).decode("ascii")}
    url = f"{server.rstrip('/')}/v1/objects"

    try:
        if client is None:
            with httpx.Client(timeout=UPLOAD_TIMEOUT_SECONDS) as owned:
                response = owned.post(url, json=body)
        else:
            response = client.post(url, json=body)
    except httpx.HTTPError as e:
        raise UploadFailedError(str(e) or type(e).__name__) from e

    if response.status_code != 201:
        raise UploadFailedError(_failure_reason(response))

    location = response.json().get("url")
    if not location:
        raise UploadFailedError("server response did not include a url")
    return str(location)


def cmd_upload(args: argparse.Namespace) -> int:
    """Execute the upload command."""
    try:
        location = upload_file(args.path, args.server)
    except UploadFailedError as e:
        print(f"file upload failed with: {e.reason}")
        return 1

    print(f"your image is now available at: {location}")
    return 0


def settings_from_args(args: argparse.Namespace, environ: Any = None) -> Settings:
    """Build settings from the environment, then apply explicit serve flags.

    Raises:
        ConfigError: If a value is malformed or out of range.
    """
    settings = Settings.from_env(environ)
    overrides = {
        field: getattr(args, field)
        for field in _SERVE_OVERRIDES
        if getattr(args, field, None) is not None
    }
    if "domain" in overrides:
        overrides["domain"] = overrides["domain"].rstrip("/")
    if "log_level" in overrides:
        overrides["log_level"] = overrides["log_level"].upper()
    settings = dataclasses.replace(settings, **overrides)
    settings.check()
    return settings


def cmd_serve(args: argparse.Namespace) -> int:
    """Execute the serve command."""
    from catly.server import run_servers

    try:
        settings = settings_from_args(args)
    except ConfigError as e:
        print(f"invalid configuration: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    try:
        run_servers(settings)
    except StorageDirectoryError as e:
        logger.error("storage unavailable: %s", e)
        return 1
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="catly",
        description="Catly - write-once image hosting",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the upload and read APIs",
    )
    serve_parser.add_argument(
        "--storage-path",
        metavar="PATH",
        help='":memory:" or a storage directory (env: CATLY_STORAGE_PATH)',
    )
    serve_parser.add_argument(
        "--domain",
        metavar="URL",
        help="Public scheme and host for returned URLs (env: CATLY_DOMAIN)",
    )
    serve_parser.add_argument(
        "--host",
        help="Bind address for both listeners (env: CATLY_HOST)",
    )
    serve_parser.add_argument(
        "--http-port",
        type=int,
        metavar="PORT",
        help="Read API port (env: CATLY_HTTP_PORT)",
    )
    serve_parser.add_argument(
        "--upload-port",
        type=int,
        metavar="PORT",
        help="Upload API port (env: CATLY_UPLOAD_PORT)",
    )
    serve_parser.add_argument(
        "--max-request-size",
        type=int,
        metavar="BYTES",
        help="Maximum request body size (env: CATLY_MAX_REQUEST_SIZE)",
    )
    serve_parser.add_argument(
        "--log-level",
        help="Log level (env: CATLY_LOG_LEVEL)",
    )

    # upload command
    upload_parser = subparsers.add_parser(
        "upload",
        help="Upload an image file",
    )
    upload_parser.add_argument(
        "path",
        metavar="PATH",
        help="Path of the file to upload",
    )
    upload_parser.add_argument(
        "--server",
        default=DEFAULT_SERVER_URL,
        metavar="URL",
        help=f"Upload API base URL (default: {DEFAULT_SERVER_URL})",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "serve":
        return cmd_serve(args)

    if args.command == "upload":
        return cmd_upload(args)

    return 0


if __name__ == "__main__":
    sys.exit(main())
